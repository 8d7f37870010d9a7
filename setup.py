from setuptools import find_packages, setup

setup(
    name="file-watcher",
    version="0.3.0",
    description="Run a command in the project root whenever matching files change",
    author="Araray Velho",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click",
        "toml",
        "pyyaml",
        "rich",
        "watchdog"
    ],
    extras_require={
        "test": ["pytest"]
    },
    entry_points={
        "console_scripts": [
            "file-watcher=filewatcher.cli:main"
        ]
    },
)
