"""DictLoader -- in-memory partials without filesystem.

Partials come from a dictionary. No templates directory needed.
Use case: tests, generated templates, single-file apps.

Run:
    python app.py
"""

from stache import DictLoader, Environment

templates = {
    "page": """\
<!DOCTYPE html>
<html>
<head><title>{{title}}</title></head>
<body>
  {{>nav}}
  <main>
    <h1>{{heading}}</h1>
    {{#paragraphs}}
    <p>{{.}}</p>
    {{/paragraphs}}
  </main>
</body>
</html>
""",
    "nav": """\
<nav>
{{#nav_items}}
  <a href="{{{url}}}">{{label}}</a>
{{/nav_items}}
</nav>
""",
}

env = Environment(loader=DictLoader(templates))

output = env.get_template("page").render(
    title="In-Memory Partials",
    heading="Hello from DictLoader",
    paragraphs=["No filesystem needed.", "Partials resolve through the loader."],
    nav_items=[
        {"url": "/", "label": "Home"},
        {"url": "/docs", "label": "Docs"},
    ],
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
