"""Allow ``python -m catalogo_query``."""

from .cli import main

if __name__ == "__main__":
    main()
