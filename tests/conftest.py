"""
Test environment.

Settings are read once at import time, so the environment is pointed at
an in-memory SQLite database and a scratch upload directory before any
eduopps module is imported.
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FILE_STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="eduopps-uploads-")
os.environ["SMTP_HOST"] = ""
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
