import re
from pathlib import Path
from setuptools import find_packages, setup


version = re.search(
    r"^__version__ = ['\"]([^'\"]+)['\"]",
    Path(__file__).with_name('weftmatch').joinpath('__init__.py').read_text(),
    re.M,
).group(1)


setup(
    name='weftmatch',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*', 'examples']),
    python_requires='>=3.10',
    install_requires=[
        'typing-extensions'
    ],
    extras_require={
        'dev': ['mypy',
                'pytest',
                'pytest-cov',
                'coverage',
                'mypy-extensions',
                'hypothesis']
    }
)
