# models/schema_defaults.py

"""
サイト固有のスキーマが無い場合に使う既定スキーマ。
import 時に一度だけ構築し、以降は不変オブジェクトとして共有する。
"""

from models.schema_models import (
    ComponentDefinitionDocument,
    ComponentFilter,
    ComponentModel,
    ComponentSchema,
)

DEFAULT_HTML_TEMPLATE = "<body><header></header><main><div></div></main><footer></footer></body>"

DEFAULT_COMPONENT_DEFINITIONS = ComponentDefinitionDocument.model_validate(
    {
        "groups": [
            {
                "title": "Default Content",
                "id": "default",
                "components": [
                    {
                        "title": "Text",
                        "id": "text",
                        "plugins": {"da": {"name": "text", "type": "text"}},
                    },
                    {
                        "title": "Image",
                        "id": "image",
                        "plugins": {"da": {"name": "image", "type": "image"}},
                    },
                ],
            },
            {
                "title": "Sections",
                "id": "sections",
                "components": [
                    {
                        "title": "Section",
                        "id": "section",
                        "plugins": {"da": {"unsafeHTML": "<div></div>"}},
                        "filter": "section",
                        "model": "section",
                    },
                ],
            },
            {
                "title": "Blocks",
                "id": "blocks",
                "components": [],
            },
        ],
    }
)

DEFAULT_COMPONENT_MODELS = tuple(
    ComponentModel.model_validate(m)
    for m in [
        {
            "id": "page-metadata",
            "fields": [
                {
                    "component": "container",
                    "label": "Fieldset",
                    "fields": [
                        {"component": "text", "name": "title", "label": "Title"},
                        {"component": "text", "name": "description", "label": "Description"},
                        {
                            "component": "text",
                            "valueType": "string",
                            "name": "robots",
                            "label": "Robots",
                            "description": "Index control via robots",
                        },
                    ],
                },
            ],
        },
        {
            "id": "image",
            "fields": [
                {"component": "reference", "name": "image", "hidden": True, "multi": False},
                {"component": "reference", "name": "img:nth-child(3)[src]", "label": "Image", "multi": False},
                {"component": "text", "name": "img:nth-child(3)[alt]", "label": "Alt Text"},
            ],
        },
        {
            "id": "section",
            "fields": [
                {"component": "text", "name": "style", "label": "Style"},
            ],
        },
    ]
)

DEFAULT_COMPONENT_FILTERS = (
    ComponentFilter(id="main", components=("section",)),
    ComponentFilter(id="section", components=("text", "image")),
)

DEFAULT_SCHEMA = ComponentSchema(
    definitions=DEFAULT_COMPONENT_DEFINITIONS,
    models=DEFAULT_COMPONENT_MODELS,
    filters=DEFAULT_COMPONENT_FILTERS,
)
