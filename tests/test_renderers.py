from tagshelf.renderers import MarkdownRenderer, _generate_heading_id


def test_footnotes_render_at_end_of_document():
    body = "Gas fees add up.[^1] So do retries.[^2]\n\n[^1]: Especially on mainnet.\n[^2]: Always.\n\n## Wrap up\n\nDone.\n"
    html = MarkdownRenderer().render(body)
    assert 'class="footnotes"' in html
    assert "Especially on mainnet." in html
    assert html.index("Wrap up") < html.index('class="footnotes"')
    assert html.index("Gas fees") < html.index("Especially on mainnet.")


def test_footnotes_do_not_leak_between_documents():
    renderer = MarkdownRenderer()
    renderer.render("One.[^a]\n\n[^a]: First document.\n")
    html = renderer.render("Two.\n")
    assert "First document." not in html
    assert "footnotes" not in html


def test_heading_ids_are_unique():
    html = MarkdownRenderer().render("## Setup\n\ntext\n\n## Setup\n\nmore\n")
    assert '<h2 id="setup">Setup</h2>' in html
    assert '<h2 id="setup-1">Setup</h2>' in html
    assert _generate_heading_id("Hello, World!") == "hello-world"


def test_code_blocks_are_highlighted_or_escaped():
    renderer = MarkdownRenderer()
    highlighted = renderer.render("```python\nprint(1)\n```\n")
    assert 'class="highlight"' in highlighted

    plain = renderer.render("```nosuchlanguage\na < b\n```\n")
    assert '<pre><code class="language-nosuchlanguage">a &lt; b' in plain

    bare = renderer.render("```\nx & y\n```\n")
    assert "<pre><code>x &amp; y" in bare


def test_tables_and_strikethrough():
    html = MarkdownRenderer().render("| a | b |\n|---|---|\n| 1 | 2 |\n\n~~gone~~\n")
    assert "<table>" in html
    assert "<del>gone</del>" in html
