"""Setup configuration for prneko"""

from setuptools import setup, find_packages

setup(
    name="prneko",
    version="0.1.0",
    description=(
        "GitHub pull request companion: sorts your PRs into blocked, "
        "merge-ready, waiting and pending-review queues with a mood mascot."
    ),
    author="PR Neko Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "prneko=prneko.main:main",
        ],
    },
)
