"""Built-in dataset used on first start and whenever persisted data is unusable."""

from .models import AppState, ArchiveItem, Category, Project, ProjectStatus, Service

DEFAULT_SITE_TITLE = "ODEMIND"
DEFAULT_TAGLINE = (
    "ODEMIND OPERATES AS AN ASIAN CONTENT AND DISTRIBUTION HUB, COLLABORATING WITH "
    "STRATEGIC PARTNERS ACROSS CHINA, TAIWAN, HONG KONG, AND INDONESIA."
)

DEFAULT_PROJECTS = (
    Project(
        id="ODM-PRJ-2004-001",
        title="CYBER-PUNK BRANDING",
        category=Category.BRANDING,
        client="NEO-SEOUL CO.",
        status=ProjectStatus.COMPLETED,
        date="2004-03-12",
        description="Visual identity system for a futuristic tech startup based in Seoul.",
        image_urls=("https://picsum.photos/seed/odemind1/800/600",),
    ),
    Project(
        id="ODM-PRJ-2004-002",
        title="URBAN SPACE DESIGN",
        category=Category.SPACE,
        client="VOID ATELIER",
        status=ProjectStatus.COMPLETED,
        date="2004-02-15",
        description="Minimalist industrial interior design for a flagship concept store.",
        image_urls=("https://picsum.photos/seed/odemind2/800/600",),
    ),
)

DEFAULT_ARCHIVE = (
    ArchiveItem(
        id="1",
        year="2015 - Present",
        company="Le Labo",
        category="Retail, Beauty",
        project="Ecommerce & Photography",
        image_url="https://picsum.photos/seed/lelabo/400/600",
    ),
    ArchiveItem(
        id="2",
        year="2019 - Present",
        company="Huckberry",
        category="Retail, Apparel",
        project="Headless Ecommerce Launch",
        image_url="https://picsum.photos/seed/huckberry/400/600",
    ),
)

DEFAULT_SERVICES = (
    Service(
        id="S-01",
        number="01",
        title="CONTENT ARCHITECTURE",
        description="Optimizing brand positioning through strategic planning that evolves with the times.",
    ),
    Service(
        id="S-02",
        number="02",
        title="BRANDING SYSTEMS",
        description="Mastering brand positioning through strategic planning and evolved visual identity",
    ),
)


def default_state() -> AppState:
    return AppState(
        projects=DEFAULT_PROJECTS,
        archive_items=DEFAULT_ARCHIVE,
        services=DEFAULT_SERVICES,
        site_title=DEFAULT_SITE_TITLE,
        tagline=DEFAULT_TAGLINE,
    )
