import os

from setuptools import setup, find_packages

with open(os.path.join(os.path.dirname(__file__), "readme.md"), "r") as fh:
    long_description = fh.read()

setup(
    name='deisbikes',
    version='2.0.0',
    license='MIT',
    description='The rental session engine behind the DeisBikes campus bike share.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires='>=3.10',
    install_requires=[
        'aiohttp>=3.8',
        'aiohttp-apispec',
        'aiohttp-cors',
        'uvloop',
        'aiobreaker',
        'marshmallow>=3.13,<4',
        'marshmallow-jsonschema',
        'sentry-sdk',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
            'pytest-aiohttp',
            'faker',
        ],
    },
    entry_points={
        'console_scripts': ['deisbikes=deisbikes.cli:run'],
    },
)
