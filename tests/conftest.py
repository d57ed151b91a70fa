"""Shared fixtures: component schemas and sample pages"""

import pytest

from models.schema_models import ComponentSchema


SCHEMA_DEFINITION = {
    "groups": [
        {
            "title": "Sections",
            "id": "sections",
            "components": [
                {"title": "Section", "id": "section", "filter": "section", "model": "section"},
            ],
        },
        {
            "title": "Blocks",
            "id": "blocks",
            "components": [
                {
                    "title": "Hero",
                    "id": "hero",
                    "plugins": {"da": {"fields": [{"name": "image", "selector": "picture"}]}},
                },
                {"title": "Cards", "id": "cards"},
                {
                    "title": "Card",
                    "id": "card",
                    "plugins": {
                        "da": {
                            "fields": [
                                {"name": "image", "selector": "div:nth-child(1) > picture"},
                                {"name": "text", "selector": "div:nth-child(2)"},
                            ]
                        }
                    },
                },
                {"title": "Columns", "id": "columns", "plugins": {"da": {"behaviour": "columns"}}},
                {"title": "Settings", "id": "settings", "plugins": {"da": {"type": "key-value-block"}}},
            ],
        },
    ]
}

SCHEMA_MODELS = [
    {"id": "hero", "fields": [{"component": "reference", "name": "image", "label": "Hero Image"}]},
    {
        "id": "card",
        "fields": [
            {"component": "reference", "name": "image", "label": "Image"},
            {"component": "richtext", "name": "text", "label": "Text"},
        ],
    },
    {
        "id": "settings",
        "fields": [
            {"component": "text", "name": "Title", "label": "Title Label"},
            {"component": "richtext", "name": "Body"},
        ],
    },
]

SCHEMA_FILTERS = [
    {"id": "main", "components": ["section"]},
    {"id": "section", "components": ["text", "image", "hero", "cards", "columns"]},
    {"id": "cards", "components": ["card"]},
    {"id": "columns-cell", "components": ["text", "image"]},
]


PAGE_HTML = """\
<body>
  <header></header>
  <main>
    <div>
      <h1>Welcome</h1>
      <p>Intro paragraph.</p>
      <picture><img src="/media/hero.png" alt="hero"></picture>
      <div class="hero dark">
        <div><div><picture><img src="/media/a.png"></picture></div></div>
      </div>
      <p>Between blocks.</p>
      <div class="cards">
        <div><div><picture><img src="/media/c1.png"></picture></div><div><p>Card one</p></div></div>
        <div><div><picture><img src="/media/c2.png"></picture></div><div><p>Card two</p></div></div>
      </div>
    </div>
    <div>
      <div class="columns">
        <div>
          <div><p>Left</p></div>
          <div><picture><img src="/media/right.png"></picture><p>Right</p></div>
        </div>
        <div>
          <div>Second row</div>
        </div>
      </div>
      <div class="settings">
        <div><div>Title</div><div>My text</div></div>
        <div><div>Unknown</div><div>ignored</div></div>
        <div><div>Single column</div></div>
      </div>
      <div class="metadata">
        <div><div>Title</div><div>Page title</div></div>
      </div>
      <div><p>Classless</p></div>
    </div>
  </main>
  <footer></footer>
</body>
"""


@pytest.fixture(name="schema")
def schema_fixture():
    return ComponentSchema.from_documents(SCHEMA_DEFINITION, SCHEMA_MODELS, SCHEMA_FILTERS)


@pytest.fixture(name="page_html")
def page_html_fixture():
    return PAGE_HTML
