from finger.app.cli import invoke

if __name__ == "__main__":
    invoke()
