import os
import tempfile

# must run before storefront.config is imported anywhere
_tmp = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp, 'test.db')}"
os.environ["STORAGE_DIR"] = os.path.join(_tmp, "blobs")
os.environ["STORAGE_PUBLIC_URL"] = "http://testserver/uploads"
