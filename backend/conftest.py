"""Pytest configuration to expose the backend package for imports.

Also points the image directory at a throwaway location before the
application module is imported, so collecting tests never writes into
the working tree.
"""

import os
import pathlib
import sys
import tempfile

BACKEND_ROOT = pathlib.Path(__file__).resolve().parent

if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault(
    "IMAGE_DIR",
    tempfile.mkdtemp(prefix="school_directory_images_"),
)
