from setuptools import setup, find_packages

# Read requirements
with open("requirements/base.txt") as f:
    base_requirements = f.read().splitlines()

setup(
    name="bdd-e2e",
    version="0.1.0",
    author="BDD E2E Contributors",
    description="Playwright end-to-end testing with Gherkin scenarios and page objects",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.11",
    install_requires=base_requirements,
    extras_require={
        "dev": ["pytest", "pytest-asyncio", "black", "flake8", "mypy"],
        "test": ["pytest", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": [
            "bdd-e2e=bdd_e2e.cli:main",
        ],
    },
)
