"""File-based templates -- the most common real-world pattern.

Loads templates from disk with FileSystemLoader. Partials such as
``{{>header}}`` resolve to ``header.mustache`` in the same directory, and
standalone partial tags are indented to match their line.

Run:
    python app.py
"""

from pathlib import Path

from stache import Environment, FileSystemLoader

templates_dir = Path(__file__).parent / "templates"
env = Environment(loader=FileSystemLoader(str(templates_dir)))

home_template = env.get_template("home")

home_output = home_template.render(
    site_name="Travel Log",
    title="Journeys",
    message="Trips & detours of the year.",
    journeys=[
        {"from": "Lyon", "to": "Turin", "distance": 312, "notes": "over the Alps"},
        {"from": "Turin", "to": "Genoa", "distance": 170},
    ],
)

empty_output = home_template.render(
    site_name="Travel Log",
    title="Journeys",
    message="Nothing here.",
    journeys=[],
)


def main() -> None:
    print("=== Home Page ===")
    print(home_output)
    print()
    print("=== Empty Page ===")
    print(empty_output)


if __name__ == "__main__":
    main()
