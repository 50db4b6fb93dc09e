"""
Device entry point
 - Single responsibility: Launch the now playing controller
 - Imports and calls hardware.app.main()
"""
import sys
from hardware.app import main

if __name__ == "__main__":
    sys.exit(main())
