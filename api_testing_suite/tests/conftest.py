"""
Shared pytest setup.

Points the application settings at a throwaway directory before any
test module imports the app, so lifespan startup never writes into the
working directory.
"""

import os
import tempfile

_work_dir = tempfile.mkdtemp(prefix="api_testing_suite_")

os.environ.setdefault("API_SUITE_DATABASE_URL", f"sqlite:///{os.path.join(_work_dir, 'app.db')}")
os.environ.setdefault("API_SUITE_CONTENT_DIR", os.path.join(_work_dir, "content"))
os.environ.setdefault("API_SUITE_SCHEMAS_DIR", os.path.join(_work_dir, "schemas"))
