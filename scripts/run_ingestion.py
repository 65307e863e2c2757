# scripts/run_ingestion.py
"""
Run the Taxi Trip ETL from a source checkout without installing it

    python scripts/run_ingestion.py --input sample-cab-data.csv
"""

import sys
from pathlib import Path

# Add the repository root to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from taxi_trip_etl.cli import main


if __name__ == '__main__':
    sys.exit(main())
