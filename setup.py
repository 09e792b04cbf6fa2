from setuptools import setup, find_packages
import pathlib

# Detect layout
use_src = pathlib.Path("src/saftools").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".")}

setup(
    name="saf-tools",
    version="0.1.0",
    include_package_data=True,
    package_data={"saftools": ["templates/*.j2"]},
    python_requires=">=3.9",
    install_requires=[
        "typer",
        "jinja2",
        "pyyaml",
        "pydantic>=2",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["saftools = saftools.cli:app"]},
    **pkg_args
)
