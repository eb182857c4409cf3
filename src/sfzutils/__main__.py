# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Run the SFZ command-line tool with `python -m sfzutils lex|compile|play FILE`.
"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
