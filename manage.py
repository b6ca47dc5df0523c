"""
This is the main file to run the game.
It imports the run function from the block_dodger app and runs it.
"""

from block_dodger.app import run

if __name__ == "__main__":
    run()
