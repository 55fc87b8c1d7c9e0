from setuptools import setup, find_packages

setup(
    name="music-fetcher",
    version="0.1",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "aiohttp",
        "aiofiles",
        "beautifulsoup4",
        "tqdm",
        "pyyaml"
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    python_requires=">=3.10",
)
