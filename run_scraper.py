"""
Run the free-tier email limits scraper once
"""
import asyncio
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

def main() -> int:
    """Run the complete scraper"""
    print("FREE-TIER EMAIL LIMITS SCRAPER")
    print("=" * 50)

    from freetier_scraper.main import main as run

    return asyncio.run(run())

if __name__ == "__main__":
    sys.exit(main())
