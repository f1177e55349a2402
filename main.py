"""Launch the terminal Sokoban game from a source checkout."""

from sokoban.ui.main import main


if __name__ == "__main__":
    main()
