"""Entry point for ``python -m fractalboxes``."""
from fractalboxes.main import main

if __name__ == "__main__":
    main()
