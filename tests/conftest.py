import os

# Settings are read at import time and the session secret has no default
os.environ.setdefault("SESSION_SECRET_KEY", "test-secret")
