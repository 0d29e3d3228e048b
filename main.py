# Main File

from chatstore.cli import run

if __name__ == "__main__":
    run()
