import os
import sys

# Add the project root directory to Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

# Import the main module
from TermIndex.main import cli

if __name__ == "__main__":
    cli()
