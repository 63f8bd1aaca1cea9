"""
Configuration Module
Settings for model location, label matching, inference pool size and server binding.
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Model Location ---
DEFAULT_MODEL_PATH = "/data"
MODEL_PATH = os.getenv("MODEL_PATH", DEFAULT_MODEL_PATH)
MODEL_FILE = os.getenv("MODEL_FILE", "resnet34.pth")
LABELS_FILE = os.getenv("LABELS_FILE", "imagenet_classes.txt")

# --- Prediction Matching ---
TOP_K = int(os.getenv("TOP_K", "5"))
TARGET_TERMS = tuple(
    term.strip()
    for term in os.getenv("TARGET_TERMS", "fox,vulpes").split(",")
    if term.strip()
)

# --- Inference Pool ---
INFERENCE_WORKERS = int(os.getenv("INFERENCE_WORKERS", "2"))

# --- Upload Limits ---
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(20 * 1024 * 1024)))  # 20 MB

# --- Server ---
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "info")
