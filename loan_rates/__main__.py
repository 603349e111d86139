import sys

from loan_rates.cli import main

if __name__ == "__main__":
    sys.exit(main())
