#!/usr/bin/env python3
"""
s3lite command-line entry point

Sign URLs and access objects in an S3-compatible store.

Usage:
    python run.py presign photos/cat.jpg                 # Pre-signed GET URL
    python run.py presign up.bin --method PUT --expires 600
    python run.py form-upload up.bin --policy policy.json --acl public-read
    python run.py exists photos/cat.jpg
    python run.py head photos/cat.jpg
    python run.py get photos/cat.jpg -o cat.jpg
    python run.py --profile media delete photos/cat.jpg
"""

import sys
from s3lite.cli import main

if __name__ == "__main__":
    sys.exit(main())
