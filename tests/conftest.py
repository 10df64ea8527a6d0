import os
import tempfile


# Keep cache files out of the working tree and never reach for a live Redis.
os.environ.setdefault("ANTLYST_DATA_DIR", tempfile.mkdtemp(prefix="antlyst-tests-"))
os.environ.setdefault("REDIS_URL", "")
