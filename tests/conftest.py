from dotenv import load_dotenv

from tests.test_fixtures import (  # noqa: F401
    dest_dir,
    empty_source_dir,
    source_dir,
)

# Ensure environment variables from .env are available during test collection
load_dotenv()
