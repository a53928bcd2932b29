"""Hello World -- the simplest stache example.

Parse a template from a string and render it with a view.
No templates directory needed.

Run:
    python app.py
"""

from stache import Environment

env = Environment()

# Parse from string
template = env.from_string("Hello, {{name}}!")

# Render with a view
output = template.render(name="World")


def main() -> None:
    print(output)
    print()

    # Multiple renders with different views
    for name in ["Stache", "Mustache", "Python"]:
        print(template.render({"name": name}))


if __name__ == "__main__":
    main()
