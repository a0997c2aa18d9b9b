#!/usr/bin/env python3
"""
Training script for the job match engagement model

    python train_model.py train --data export.json
    python train_model.py train --data export.json --quick
    python train_model.py status
"""

import sys
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

from job_match.cli import main

if __name__ == "__main__":
    sys.exit(main())
