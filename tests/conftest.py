import os

# Keep the API's shared store in memory during tests.
os.environ.setdefault("CHESSPLATFORM_STORE_PATH", "")
