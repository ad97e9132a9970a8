#!/usr/bin/env python

from setuptools import find_packages, setup

_rst_section = "\n--------"

with open("README.rst") as readme_file:
    readme = readme_file.read()

    # Only take text up to the first section
    if _rst_section in readme:
        readme = readme.split(_rst_section)[0]
        readme = "\n".join(readme.split("\n")[:-1])

with open("HISTORY.rst") as history_file:
    history = history_file.read()

    # Only take text from up to 6 sections
    _history_split = history.split(_rst_section)
    if len(_history_split) > 7:
        history = _rst_section.join(_history_split[:7])
        history = "\n".join(history.split("\n")[:-1])

setup(
    name="rabbitmq-http-client",
    version="0.1.0",
    description="Typed client for the RabbitMQ HTTP management API",
    long_description=readme + "\n\n" + history,
    long_description_content_type="text/x-rst",
    license="BSD-3-Clause",
    python_requires=">=3.8",
    package_dir={"": "src"},
    packages=find_packages("src"),
    install_requires=[
        "httpx>=0.24",
        "marshmallow>=3.13",
        "pydantic>=2",
        "PyYAML",
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "pytest-mock",
            "requests-mock",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: System :: Distributed Computing",
    ],
)
