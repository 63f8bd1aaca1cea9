"""Launch FastAPI server with correct Python path."""
import sys
import os

# Add src to path
backend_src = os.path.join(os.path.dirname(__file__), "src")
sys.path.insert(0, backend_src)

if __name__ == "__main__":
    import uvicorn

    import config

    print(f"Running on http://localhost:{config.API_PORT}")
    uvicorn.run(
        "api.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=False,
        log_level=config.LOG_LEVEL,
    )
