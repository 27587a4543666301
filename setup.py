"""Setup script for the icsproxy ICS timezone proxy."""

from pathlib import Path

from setuptools import find_packages, setup

HERE = Path(__file__).parent

readme = HERE / "README.md"
long_description = readme.read_text(encoding="utf-8") if readme.exists() else ""


def _split_requirements(path: Path) -> tuple[list[str], list[str]]:
    """Runtime and test requirements; test lines mention pytest or carry a '# testing' tag."""
    runtime: list[str] = []
    testing: list[str] = []
    if not path.exists():
        return runtime, testing
    for raw in path.read_text(encoding="utf-8").splitlines():
        spec, _, note = raw.partition("#")
        spec = spec.strip()
        if not spec:
            continue
        if "pytest" in spec or "testing" in note.lower():
            testing.append(spec)
        else:
            runtime.append(spec)
    return runtime, testing


requirements, dev_requirements = _split_requirements(HERE / "requirements.txt")

setup(
    name="icsproxy",
    version="1.0.0",
    description="ICS calendar proxy that rewrites event times into a single IANA timezone",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["icsproxy", "icsproxy.*"]),
    install_requires=requirements,
    extras_require={
        "dev": dev_requirements,
    },
    python_requires=">=3.11",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Web Environment",
        "Intended Audience :: System Administrators",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Scheduling",
        "Topic :: Internet :: Proxy Servers",
        "Framework :: AsyncIO",
    ],
    keywords="calendar ics icalendar outlook google-calendar timezone proxy aiohttp",
    entry_points={
        "console_scripts": [
            "icsproxy=icsproxy.__main__:main",
        ],
    },
    zip_safe=False,
    platforms=["linux", "macos"],
)
