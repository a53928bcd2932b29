"""Lambdas -- sections that call back into Python.

A section whose value is callable receives the raw, unrendered text of the
section and a ``render`` function. Whatever it returns is emitted as-is.

Views reach such a function through a callable member, so the member is
called once during lookup and must return the section function.

Run:
    python app.py
"""

from stache import Environment

env = Environment()


def bold():
    def wrap(text, render):
        return f"<b>{render(text)}</b>"

    return wrap


def upper():
    return lambda text, render: render(text).upper()


class Invoice:
    def __init__(self, customer, items):
        self.customer = customer
        self.items = items

    def total(self):
        return sum(item["price"] for item in self.items)


template = env.from_string(
    "{{#bold}}Hi {{customer}}{{/bold}}\n"
    "{{#items}}\n"
    "- {{#upper}}{{name}}{{/upper}}: {{price}}\n"
    "{{/items}}\n"
    "Total: {{total}}\n"
)

invoice = Invoice("Ada", [{"name": "tea", "price": 4}, {"name": "scones", "price": 6}])
view = {
    "customer": invoice.customer,
    "items": invoice.items,
    "total": invoice.total,
    "bold": bold,
    "upper": upper,
}

output = template.render(view)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
