"""
Code for "python3 -mhelm".
"""

from helm._main import main

main()
