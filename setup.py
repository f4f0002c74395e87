"""
Setup script for Plover - a pure Python package, there are no native extensions to build.
"""

from setuptools import find_packages
from setuptools import setup

LIBRARY = "plover"

__version__ = "notset"
with open(f"{LIBRARY}/__version__.py", "r", encoding="UTF8") as v:
    exec(v.read())

setup(
    name=LIBRARY,
    version=__version__,
    description="Lowers query engine expressions to a native execution engine's IR",
    packages=find_packages(include=[LIBRARY, f"{LIBRARY}.*"]),
    python_requires=">=3.11",
    install_requires=["numpy", "orjson", "pyarrow"],
    extras_require={"tests": ["hypothesis", "pytest"]},
    zip_safe=False,
)
