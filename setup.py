# Note: you shouldn't need to run this script manually.  It is run implicitly by the pip3 install command.

import pathlib
from setuptools import setup

# The directory containing this file
HERE = pathlib.Path(__file__).parent

with open(HERE / "README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# This call to setup() does all the work
setup(
    name="eventrx",
    version="1.0.0",
    description="Observables from event emitters: adapt named-event sources to reactivex",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="eventrx Developers",
    license="MPL-2.0",
    classifiers=[
        "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    packages=["eventrx"],
    include_package_data=True,
    install_requires=["reactivex>=4.0.4", "pypubsub>=4.0.3", "requests>=2.25.0", "tabulate>=0.8.9"],
    extras_require={
        'test': ["pytest>=7.0", "hypothesis>=6.0"]
    },
    python_requires='>=3.8',
    entry_points={
        "console_scripts": [
            "eventrx=eventrx.__main__:main",
        ]
    },
)
