from __future__ import annotations

import subprocess
import sys


def main():
    subprocess.run([sys.executable, "-m", "src.entrypoints.cli", *sys.argv[1:]], check=True)


if __name__ == "__main__":
    main()
