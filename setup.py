# setup.py
from setuptools import setup, find_packages

setup(
    name="WebToEpub",
    version="1.0.0",
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'requests>=2.31.0',
        'beautifulsoup4>=4.12.0',
        'EbookLib>=0.18.0',
        'Pillow>=10.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'webtoepub=webtoepub.cli:main',
        ],
    },
    description="Convert a web novel's chapter pages into a single EPUB file",
    long_description=open('README.md').read(),
    long_description_content_type="text/markdown",
    keywords="web novel, light novel, scraper, epub, ebook",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.8',
)
