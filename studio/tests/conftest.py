import os

# must be set before studio.settings is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./studio_test.db")
os.environ.setdefault("STUDIO_ENV", "test")
os.environ.setdefault("STUDIO_ADMIN_KEY", "test-admin-key")
