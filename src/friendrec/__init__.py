"""Friend recommendation service."""

from dotenv import load_dotenv

# Load .env before any module reads limits, index names or credentials
# from os.environ.
load_dotenv()
