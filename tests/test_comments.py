import pytest

from promptgen import comments
from promptgen.comments import remove_empty_lines, strip_comments, syntax_for


def test_rust_line_and_block_comments_keep_strings_and_chars():
    src = (
        "fn main() {\n"
        "    // say hi\n"
        '    let s = "// not a comment";\n'
        "    let c = '/'; /* block */\n"
        '    println!("{}", s);\n'
        "}\n"
    )
    assert strip_comments(src, "rs") == (
        "fn main() {\n"
        "\n"
        '    let s = "// not a comment";\n'
        "    let c = '/'; \n"
        '    println!("{}", s);\n'
        "}\n"
    )


def test_rust_nested_block_comment():
    assert strip_comments("a /* x /* y */ z */ b", "rs") == "a  b"


def test_rust_lifetimes_are_not_strings():
    src = "fn f<'a>(x: &'a str) -> &'a str { x } // tail"
    assert strip_comments(src, "rs") == "fn f<'a>(x: &'a str) -> &'a str { x }"


def test_python_hash_inside_strings_survives():
    src = 'x = "# not"  # real\nprint(\'#\')\n'
    assert strip_comments(src, "py") == 'x = "# not"\nprint(\'#\')\n'


def test_python_triple_quoted_string_spans_lines():
    src = 's = """\n# inside\n"""  # after\n'
    assert strip_comments(src, "py") == 's = """\n# inside\n"""\n'


def test_shell_hash_only_counts_at_word_start():
    assert strip_comments("echo $# a#b # comment\n", "sh") == "echo $# a#b\n"


def test_block_comment_between_tokens_leaves_a_space():
    assert strip_comments("int a/* c */=1;", "c") == "int a =1;"
    assert strip_comments("<p>hi</p><!-- note --><b>x</b>", "html") == "<p>hi</p> <b>x</b>"


def test_lua_long_comment_and_line_comment():
    assert strip_comments("x = 1 --[[ block\n]] y = 2 -- c\n", "lua") == "x = 1  y = 2\n"


def test_unterminated_block_comment_is_left_alone():
    assert strip_comments("int x; /* open", "c") == "int x; /* open"


def test_unknown_extension_passes_through():
    text = "# Title\n// not touched\n"
    assert strip_comments(text, "md") == text


def test_syntax_lookup_ignores_dot_and_case():
    assert syntax_for(".RS") is comments.RUST
    assert syntax_for("weird") is None


@pytest.mark.parametrize(
    "text, ext",
    [
        ("let x = 1;\nlet y = x + 2;\n", "rs"),
        ("def f(a, b):\n    return a * b\n", "py"),
        ("body { color: red; }\n", "css"),
        ("SELECT a, b FROM t WHERE a = 'x';\n", "sql"),
    ],
)
def test_text_without_comments_is_unchanged(text, ext):
    assert strip_comments(text, ext) == text


@pytest.mark.parametrize(
    "text, ext",
    [
        ("a/**//**/b // c\n/* d */ e", "c"),
        ("x /**// y", "js"),
        ("a /* x /* y */ z */ b\n// end", "rs"),
        ("v = 1 # one\n'''# doc'''  # two\n", "py"),
        ("echo hi # x\nls#y\n", "sh"),
        ("key = \"#v\" # c\n", "toml"),
        ("p { } /* x */\n", "css"),
        ("{- a {- b -} -} main = 1 -- c", "hs"),
    ],
)
def test_stripping_is_idempotent(text, ext):
    once = strip_comments(text, ext)
    assert strip_comments(once, ext) == once


def test_remove_empty_lines():
    assert remove_empty_lines("a\n\n  \nb\n") == "a\nb"
