"""
Example survey builder for demos and tests.

Builds a small survey with one external section. The roof element has a
catalog inspection and a local component instantiated from a survey-only
definition; the chimney element is excluded from the survey.
"""
from surveydoc.catalog import CatalogComponent, CatalogPhrase
from surveydoc.model import ElementSection, Owner, Section, Survey
from surveydoc.resolver import instantiate
from surveydoc.tree import add_or_update_component, toggle_element_section, update_element_details

EXTERNAL = "sec-external"
ROOF = "el-roof"
CHIMNEY = "el-chimney"

EXAMPLE_CATALOG_COMPONENTS = [
    CatalogComponent(id="comp-slate", name="Slate roof covering", element_id=ROOF, order=0),
    CatalogComponent(id="comp-tile", name="Clay tile roof covering", element_id=ROOF, order=1),
    CatalogComponent(id="comp-stack", name="Brick chimney stack", element_id=CHIMNEY, order=0),
]

EXAMPLE_CATALOG_PHRASES = [
    CatalogPhrase(
        id="phrase-slipped",
        name="Slipped slates",
        phrase="A number of slates have slipped and should be refixed by a competent roofer.",
        phrase_level2="Some slates have slipped.",
        associated_component_ids=["comp-slate"],
        order=0,
    ),
    CatalogPhrase(
        id="phrase-moss",
        name="Moss growth",
        phrase="Moss growth was noted across the roof slopes.",
        phrase_level2="",
        associated_component_ids=["comp-slate", "comp-tile"],
        order=1,
    ),
]


def example_report_details(level: str = "3") -> dict:
    elevations = [
        {"path": f"report/front-{i}.jpg", "isArchived": False, "hasMetadata": True}
        for i in range(4)
    ]
    return {
        "level": level,
        "reference": "BS-2024-001",
        "clientName": "A. Client",
        "address": {
            "formatted": "1 High Street\nTownsville\nAB1 2CD",
            "line1": "1 High Street",
            "city": "Townsville",
            "postcode": "AB1 2CD",
            "location": {"lat": 51.5, "lng": -0.12},
        },
        "reportDate": "2024-01-15",
        "inspectionDate": "2024-01-10",
        "weather": "Dry and overcast",
        "orientation": "Front elevation faces south",
        "situation": "Mid-terrace on a residential street",
        "moneyShot": [{"path": "report/cover.jpg", "isArchived": False, "hasMetadata": True}],
        "frontElevationImagesUri": elevations,
    }


def example_property_description() -> dict:
    return {
        "propertyType": "Terraced house",
        "constructionDetails": "Solid brick walls under a pitched slate roof",
        "yearOfConstruction": "1905",
        "grounds": "Small front garden, rear yard",
        "services": "Mains gas, water, electricity and drainage",
        "energyRating": "D",
        "numberOfBedrooms": 3,
        "numberOfBathrooms": 1,
        "tenure": "Freehold",
    }


def example_checklist() -> dict:
    return {
        "items": [
            {"label": "Loft inspected", "type": "checkbox", "value": True, "required": True, "order": 1},
            {"label": "Drains lifted", "type": "checkbox", "value": False, "required": False, "order": 2},
        ]
    }


def build_example_survey(level: str = "3") -> Survey:
    survey = Survey(
        id="survey-1",
        owner=Owner(id="owner-1", name="Sam Surveyor", email="sam@example.com"),
        report_details=example_report_details(level),
        property_description=example_property_description(),
        checklist=example_checklist(),
        sections=[
            Section(id=EXTERNAL, name="External", element_sections=[
                ElementSection(id=ROOF, name="Roof Coverings"),
                ElementSection(id=CHIMNEY, name="Chimneys"),
            ]),
        ],
    )

    slipped = EXAMPLE_CATALOG_PHRASES[0]
    survey = add_or_update_component(survey, EXTERNAL, ROOF, {
        "id": "comp-slate",
        "inspectionId": "insp-roof-1",
        "name": "Slate roof covering",
        "ragStatus": "Amber",
        "location": "Main roof",
        "conditions": [{
            "id": slipped.id,
            "name": slipped.name,
            "phrase": slipped.phrase,
            "phraseLevel2": slipped.phrase_level2,
        }],
        "costings": [{"cost": 450, "description": "Refix slipped slates"}],
        "images": [{"path": "roof/slates.jpg", "isArchived": False}],
    })

    # Surveyor typed a component that is not in the catalog
    survey = instantiate(survey, EXTERNAL, ROOF, "Lead flashing", {
        "location": "Rear addition",
        "ragStatus": "Green",
    }).survey

    survey = update_element_details(
        survey, EXTERNAL, ROOF,
        description="Pitched roof with natural slate coverings.",
        images=[{"path": "roof/overview.jpg", "isArchived": False}],
    )

    survey = add_or_update_component(survey, EXTERNAL, CHIMNEY, {
        "id": "comp-stack",
        "inspectionId": "insp-chimney-1",
        "name": "Brick chimney stack",
    })
    survey = toggle_element_section(survey, EXTERNAL, CHIMNEY)

    return survey
