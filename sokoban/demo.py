"""Simple command line demo that replays the stored level solutions."""

from pathlib import Path

from .game import LevelCatalog, LevelId, LevelLoader, SolutionValidator


def main() -> None:
    package_root = Path(__file__).resolve().parent
    catalog = LevelCatalog(LevelLoader(package_root / "levels"))
    validator = SolutionValidator(catalog, package_root / "solutions")

    print("=== Sokoban Demo ===")
    for level_id in LevelId:
        level = catalog.get(level_id)
        solution = validator.load_solution(level_id)
        session, win = validator.replay(level_id, solution["moves"])
        metadata = level.metadata
        print(f"Level {metadata['level']}: {metadata['name']} ({metadata['boxes']} boxes)")
        for line in level.start_grid().rows_as_text():
            print(f"  {line}")
        if win is None:
            print(f"  unsolved after {len(solution['moves'])} moves")
        else:
            print(f"  {win.message}")


if __name__ == "__main__":
    main()
