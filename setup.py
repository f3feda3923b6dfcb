from setuptools import setup, find_packages

setup(
    name="voxbridge",
    version="0.1.0",
    description="Voice translation: record, transcribe, translate and re-speak recordings",
    author="",
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyaudio>=0.2.11",
        "google-cloud-speech>=2.16.0",
        "google-cloud-translate>=3.8.0",
        "google-auth>=2.10.0",
        "google-api-core>=2.10.0",
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
        "aiohttp>=3.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "voxbridge=voxbridge.main:main",
        ],
    },
)
