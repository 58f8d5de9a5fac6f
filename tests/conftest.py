from pathlib import Path

import pytest

from tailwind_docset.config import Config

DOCS_INDEX = """<!DOCTYPE html>
<html lang="en" class="[--scroll-mt:9.875rem] lg:[--scroll-mt:6.3125rem] antialiased">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width">
<meta name="description" content="Documentation for the Tailwind CSS framework.">
<link rel="preload" href="/_next/static/media/font.woff2" as="font">
<link rel="stylesheet" href="/_next/static/css/app.css">
<script src="/_next/static/chunks/main.js"></script>
<title>Installation - Tailwind CSS</title>
</head>
<body>
<div id="__next">
<div class="sticky top-0 z-40"><button type="button">v3.4.1</button></div>
<div class="fixed inset-0"><nav id="nav"><a href="/docs/container">Container</a></nav></div>
<div class="lg:pl-[19.5rem] max-w-3xl">
<h1>Installation</h1>
<p>See <a href="/docs/container">container</a>, <a href="/docs/padding#class-table">padding</a>
and <a href="https://github.com/tailwindlabs/tailwindcss">GitHub</a>.</p>
<img src="https://images.unsplash.com/photo-1?w=64&amp;q=80" alt="">
<a href="mailto:support@tailwindcss.com">Mail</a>
</div>
<footer>Footer</footer><div class="fixed bottom-0">Floating</div>
</div>
<script id="__NEXT_DATA__" type="application/json">{"buildId":"build-a","page":"/docs/[slug]"}</script>
</body>
</html>
"""

CONTAINER = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Container</title></head>
<body>
<h1>Container</h1>
<h2><a class="absolute hidden" href="#class-reference">#</a>Quick reference</h2>
<table>
<thead><tr><th>Class</th><th>Breakpoint</th><th>Properties</th></tr></thead>
<tbody>
<tr><td rowspan="3">container</td><td>None</td><td>width: 100%;</td></tr>
<tr><td>sm (640px)</td><td>max-width: 640px;</td></tr>
<tr><td>md (768px)</td><td>max-width: 768px;</td></tr>
</tbody>
</table>
</body></html>
"""

PADDING = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Padding</title></head>
<body>
<h1>Padding</h1>
<div id="class-table" class="overflow-hidden lg:max-h-96">
<table>
<thead><tr><th class="sticky top-0">Class</th><th class="sticky top-0">Properties</th></tr></thead>
<tbody>
<tr><td>p-0.5</td><td>padding: 0.125rem; /* 2px */</td></tr>
<tr><td>pl-5</td><td>padding-left: 1.25rem; /* 20px */</td></tr>
<tr><td>space-x-0 &gt; * + *</td><td>--tw-space-x-reverse: 0;
margin-right: calc(0px * var(--tw-space-x-reverse));
margin-left: calc(0px * calc(1 - var(--tw-space-x-reverse)));</td></tr>
<tr><td>sr-only</td><td>position: absolute;
clip: rect(0, 0, 0, 0);</td></tr>
</tbody>
</table>
</div>
<div class="pointer-events-none lg:hidden"><button type="button">Show all classes</button></div>
</body></html>
"""

STATES = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Handling Hover, Focus, and Other States</title></head>
<body>
<h1>Handling Hover, Focus, and Other States</h1>
<p>Style an element based on its parent with the <code>group-*</code> modifier.</p>
<p>Name a group with a <code>group/{name}</code> class.</p>
<p>Use a <code>tw-</code> class prefix.</p>
<p>For example <code>bg-sky-700 </code> class here.</p>
<h2>Quick reference</h2>
<table>
<thead><tr><th>Modifier</th><th>CSS</th></tr></thead>
<tbody>
<tr><td>hover</td><td>&amp;:hover</td></tr>
<tr><td>supports-[…]</td><td>@supports (…)</td></tr>
<tr><td>sm</td><td>@media (min-width: 640px)</td></tr>
</tbody>
</table>
<table>
<thead><tr><th>Modifier</th><th>Media query</th></tr></thead>
<tbody><tr><td>md</td><td>@media (min-width: 768px)</td></tr></tbody>
</table>
</body></html>
"""

DARK_MODE = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Dark Mode</title></head>
<body>
<h1>Dark Mode</h1>
<p>Add the <code>dark</code> class to the <code>html</code> element.</p>
<p>Several <code>dark</code> classes are not a class sample.</p>
<table>
<thead><tr><th>Modifier</th><th>CSS</th></tr></thead>
<tbody><tr><td>dark</td><td>@media (prefers-color-scheme: dark)</td></tr></tbody>
</table>
</body></html>
"""

FUNCTIONS_AND_DIRECTIVES = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Functions &amp; Directives</title></head>
<body>
<h1>Functions &amp; Directives</h1>
<h2>Directives</h2>
<h3>@tailwind</h3>
<h3>@apply</h3>
<h2>Functions</h2>
<h3>theme()</h3>
<h3>screen()</h3>
</body></html>
"""

REDIRECT = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Redirecting</title></head>
<body><h1>Redirecting</h1></body></html>
"""

APP_CSS = """@font-face { src: url(/_next/static/media/font.woff2) format("woff2"); }
.hero { background-image: url("https://images.unsplash.com/photo-1?w=64"); }
.icon { background: url('data:image/svg+xml;utf8,<svg xmlns="http://www.w3.org/2000/svg"></svg>'); }
"""

SANITY_CHECK = {
    "Class": ("container", "p-0.5", "pl-5", "space-x-0 > * + *", "dark"),
    "Modifier": ("hover:", "supports-", "sm:", "dark:", "group-", "group/"),
    "Property": (
        "padding-left: 1.25rem",
        "max-width: 768px",
        "clip: rect(0, 0, 0, 0)",
    ),
    "Function": ("theme()", "screen()"),
    "Directive": ("@tailwind", "@apply"),
}


def write_site(workdir: Path, build_id: str = "build-a") -> Path:
    """Lay out a mirrored tailwindcss.com below *workdir* and return the site dir."""
    site = workdir / "tailwindcss.com"
    files = {
        "docs/index.html": DOCS_INDEX.replace("build-a", build_id),
        "docs/container.html": CONTAINER,
        "docs/padding.html": PADDING,
        "docs/hover-focus-and-other-states.html": STATES,
        "docs/dark-mode.html": DARK_MODE,
        "docs/functions-and-directives.html": FUNCTIONS_AND_DIRECTIVES,
        "docs/old-a.html": REDIRECT,
        "docs/old-b.html": REDIRECT,
        "_next/static/css/app.css": APP_CSS,
        "_next/static/media/font.woff2": "font",
        "_next/static/chunks/main.js": "console.log(1)",
        "images.unsplash.com/photo-1?w=64": "image",
    }
    for relpath, content in files.items():
        path = site / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    (workdir / "icon.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    return site


@pytest.fixture
def config() -> Config:
    return Config(
        docset_name="Tailwind CSS",
        docs_url="https://tailwindcss.com/docs/",
        asset_hosts=("spotlight.tailwindui.com", "images.unsplash.com"),
        sanity_check=dict(SANITY_CHECK),
    )


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    write_site(tmp_path)
    return tmp_path
