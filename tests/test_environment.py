"""Test environment configuration in stache.

Tests escaping, caching, loaders, templates and the partial depth guard.
"""

import pytest

from stache import (
    ChoiceLoader,
    ConfigurationError,
    DictLoader,
    Environment,
    ErrorCode,
    FileSystemLoader,
    FunctionLoader,
    NullCache,
    TemplateCache,
    TemplateNotFoundError,
    TemplateRuntimeError,
    get_render_context,
)


class TestEscape:
    """Pluggable escaper tests."""

    def test_custom_escape(self):
        env = Environment(escape=str.upper)
        assert env.render("{{x}}", {"x": "a<b"}) == "A<B"

    def test_escape_not_applied_to_unescaped(self):
        env = Environment(escape=str.upper)
        assert env.render("{{{x}}}", {"x": "a"}) == "a"

    def test_escape_receives_strings(self):
        seen = []

        def escape(value):
            seen.append(value)
            return value

        Environment(escape=escape).render("{{n}}", {"n": 5})
        assert seen == ["5"]

    def test_swap_escape_after_parse(self, env):
        template = env.from_string("{{x}}")
        assert template.render(x="<") == "&lt;"
        env.escape = lambda value: value
        assert template.render(x="<") == "<"


class TestCaching:
    """Template cache tests."""

    def test_parse_cached(self, env):
        assert env.parse("{{a}}") is env.parse("{{a}}")

    def test_cache_info(self, env):
        env.render("{{a}}", {})
        env.render("{{a}}", {})
        assert env.cache_info() == {"size": 1, "hits": 1, "misses": 1}

    def test_tags_are_part_of_key(self, env):
        env.parse("x")
        env.parse("x", ("<%", "%>"))
        assert len(env.cache) == 2

    def test_clear_cache(self, env):
        env.parse("{{a}}")
        env.clear_cache()
        assert len(env.cache) == 0
        assert env.cache_info()["misses"] == 0

    def test_disabled(self, env_no_cache):
        assert isinstance(env_no_cache.cache, NullCache)
        assert env_no_cache.parse("{{a}}") is not env_no_cache.parse("{{a}}")

    def test_disable_after_construction(self, env):
        env.cache = None
        assert isinstance(env.cache, NullCache)

    def test_cached_and_uncached_output_identical(self, env, env_no_cache):
        template = "{{#items}}{{name}}{{^last}}, {{/last}}{{/items}}"
        view = {"items": [{"name": "a"}, {"name": "b", "last": True}]}
        first = env.render(template, view)
        assert env.render(template, view) == first
        assert env_no_cache.render(template, view) == first == "a, b"

    def test_environments_are_independent(self):
        env1, env2 = Environment(), Environment()
        env1.parse("{{a}}")
        assert len(env1.cache) == 1
        assert len(env2.cache) == 0

    def test_custom_cache_object(self):
        class DictCache:
            def __init__(self):
                self.entries = {}

            def get(self, key):
                return self.entries.get(key)

            def set(self, key, tokens):
                self.entries[key] = tokens

            def clear(self):
                self.entries.clear()

        cache = DictCache()
        env = Environment(cache=cache)
        assert env.render("{{a}}", {"a": 1}) == "1"
        assert len(cache.entries) == 1
        assert env.cache_info() == {}

    def test_invalid_cache(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Environment(cache=object())
        assert exc_info.value.code == ErrorCode.INVALID_CACHE

    def test_shared_cache(self):
        cache = TemplateCache()
        env1, env2 = Environment(cache=cache), Environment(cache=cache)
        assert env1.parse("{{a}}") is env2.parse("{{a}}")


class TestTemplate:
    """Template object tests."""

    def test_from_string(self, env):
        template = env.from_string("Hello, {{name}}!")
        assert template.render(name="World") == "Hello, World!"
        assert template.render({"name": "World"}) == "Hello, World!"

    def test_kwargs_override_mapping(self, env):
        template = env.from_string("{{a}}{{b}}")
        assert template.render({"a": 1, "b": 2}, b=3) == "13"

    def test_kwargs_shadow_object_view(self, env):
        class View:
            a = "A"
            b = "B"

        assert env.from_string("{{a}}{{b}}").render(View(), b="X") == "AX"

    def test_kwargs_named_like_parameters(self, env):
        template = env.from_string("{{view}}/{{partials}}")
        assert template.render(view="v", partials="p") == "v/p"

    def test_partials_argument(self, env):
        template = env.from_string("{{>p}}")
        assert template.render({"x": 1}, {"p": "{{x}}"}) == "1"

    def test_attributes(self, env):
        template = env.from_string("{{a}}", name="greeting")
        assert template.name == "greeting"
        assert template.source == "{{a}}"
        assert template.tokens == env.parse("{{a}}")
        assert template.env is env
        assert repr(template) == "<Template greeting>"

    def test_template_tags(self, env):
        template = env.from_string("<%x%>", tags=("<%", "%>"))
        assert template.render(x=1) == "1"

    def test_lambda_in_template(self, env):
        template = env.from_string("{{#l}}raw {{x}}{{/l}}")
        assert template.render(l=lambda: lambda text, render: text) == "raw {{x}}"

    def test_non_string_source(self, env):
        with pytest.raises(ConfigurationError):
            env.from_string(b"{{x}}")


class TestLoaders:
    """Loader tests."""

    def test_environment_loader_provides_partials(self, env_with_loader):
        result = env_with_loader.render("{{>user}}", {"name": "Ann"})
        assert result == "<b>Ann</b>"

    def test_explicit_partials_override_loader(self, env_with_loader):
        result = env_with_loader.render("{{>user}}", {"name": "Ann"}, {"user": "{{name}}!"})
        assert result == "Ann!"

    def test_loader_miss_renders_nothing(self, env_with_loader):
        assert env_with_loader.render("[{{>nope}}]", {}) == "[]"

    def test_get_template(self, env_with_loader):
        template = env_with_loader.get_template("page")
        assert template.name == "page"
        assert template.render(title="Home", name="Ann") == "<h1>Home</h1>\n<b>Ann</b>"

    def test_get_template_standalone_partials(self, env_with_loader):
        template = env_with_loader.from_string("<nav>\n  {{>list}}\n</nav>\n")
        expected = "<nav>\n  <ul>\n    <li>1</li>\n    <li>2</li>\n  </ul>\n</nav>\n"
        assert template.render(items=[1, 2]) == expected

    def test_get_template_missing(self, env_with_loader):
        with pytest.raises(TemplateNotFoundError, match="Did you mean 'user'"):
            env_with_loader.get_template("usr")

    def test_get_template_without_loader(self, env):
        with pytest.raises(TemplateNotFoundError, match="no loader configured"):
            env.get_template("page")

    def test_dict_loader_lists_available(self):
        loader = DictLoader({"alpha": "", "beta": ""})
        with pytest.raises(TemplateNotFoundError, match="Available: alpha, beta"):
            loader.get_source("zzz")
        assert loader.list_templates() == ["alpha", "beta"]

    def test_filesystem_loader(self, tmp_path):
        (tmp_path / "header.mustache").write_text("<h1>{{title}}</h1>")
        (tmp_path / "raw.txt").write_text("raw {{x}}")
        loader = FileSystemLoader(tmp_path)

        source, filename = loader.get_source("header")
        assert source == "<h1>{{title}}</h1>"
        assert filename == str(tmp_path / "header.mustache")
        assert loader.get_source("raw.txt")[0] == "raw {{x}}"
        assert loader.list_templates() == ["header.mustache"]

        env = Environment(loader=loader)
        assert env.render("{{>header}}", {"title": "T"}) == "<h1>T</h1>"

    def test_filesystem_loader_search_order(self, tmp_path):
        first, second = tmp_path / "a", tmp_path / "b"
        first.mkdir()
        second.mkdir()
        (first / "p.mustache").write_text("first")
        (second / "p.mustache").write_text("second")
        (second / "q.mustache").write_text("q")

        loader = FileSystemLoader([first, second])
        assert loader.get_source("p")[0] == "first"
        assert loader.get_source("q")[0] == "q"
        with pytest.raises(TemplateNotFoundError):
            loader.get_source("missing")

    def test_choice_loader(self):
        loader = ChoiceLoader(
            [DictLoader({"nav": "custom"}), DictLoader({"nav": "default", "foot": "f"})]
        )
        assert loader.get_source("nav")[0] == "custom"
        assert loader.get_source("foot")[0] == "f"
        assert loader.list_templates() == ["foot", "nav"]
        with pytest.raises(TemplateNotFoundError, match="any of 2 loaders"):
            loader.get_source("missing")

    def test_function_loader(self):
        def load(name):
            if name == "tuple":
                return "t", "t.mustache"
            return {"greeting": "Hello, {{name}}!"}.get(name)

        env = Environment(loader=FunctionLoader(load))
        assert env.get_template("greeting").render(name="World") == "Hello, World!"
        assert FunctionLoader(load).get_source("tuple") == ("t", "t.mustache")
        with pytest.raises(TemplateNotFoundError):
            env.get_template("missing")

    def test_loader_as_partials_argument(self, env):
        loader = DictLoader({"p": "P"})
        assert env.render("{{>p}}", {}, loader) == "P"


class TestPartialDepth:
    """Partial recursion guard tests."""

    def test_limit_exceeded(self):
        env = Environment(max_partial_depth=3)
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render("{{>p}}", {}, {"p": "x{{>p}}"})
        error = exc_info.value
        assert error.code == ErrorCode.PARTIAL_DEPTH
        assert error.partial_stack == ["p", "p", "p", "p"]
        assert "Maximum partial depth exceeded (3)" in str(error)

    def test_within_limit(self):
        env = Environment(max_partial_depth=3)
        partials = {"a": "a{{>b}}", "b": "b{{>c}}", "c": "c"}
        assert env.render("{{>a}}", {}, partials) == "abc"

    def test_no_limit_by_default(self, env):
        partials = {f"p{i}": f"{{{{>p{i + 1}}}}}" for i in range(50)}
        partials["p50"] = "end"
        assert env.render("{{>p0}}", {}, partials) == "end"

    def test_template_name_in_error(self):
        env = Environment(max_partial_depth=1, loader=DictLoader({"p": "{{>p}}"}))
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.from_string("{{>p}}", name="page").render()
        assert exc_info.value.template_name == "page"


class TestRenderContext:
    """Per-render state tests."""

    def test_no_context_outside_render(self):
        assert get_render_context() is None

    def test_lambda_sees_render_context(self, env):
        seen = []

        def spy(text, render):
            seen.append(get_render_context())
            return render(text)

        template = env.from_string("{{#spy}}{{>p}}{{/spy}}", name="page")
        assert template.render({"spy": lambda: spy}, {"p": "P"}) == "P"
        assert seen[0].template_name == "page"
        assert get_render_context() is None

    def test_partial_stack_tracked(self, env):
        stacks = []

        def spy(text, render):
            stacks.append(list(get_render_context().partial_stack))
            return ""

        partials = {"outer": "{{>inner}}", "inner": "{{#spy}}{{/spy}}"}
        env.render("{{>outer}}", {"spy": lambda: spy}, partials)
        assert stacks == [["outer", "inner"]]


class TestConfiguration:
    """Constructor and attribute validation."""

    def test_invalid_tags(self):
        with pytest.raises(ConfigurationError) as exc_info:
            Environment(tags=("{{",))
        assert exc_info.value.code == ErrorCode.INVALID_TAGS

    def test_tags_attribute_normalized(self, env):
        env.tags = "<% %>"
        assert env.tags == ("<%", "%>")

    def test_invalid_tags_attribute(self, env):
        with pytest.raises(ConfigurationError):
            env.tags = ["a", "b", "c"]

    def test_repr(self, env):
        assert repr(env) == "<Environment tags=('{{', '}}') cache=TemplateCache>"
