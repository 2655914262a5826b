from setuptools import setup, find_packages

setup(
    name="safeplate",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "jinja2>=3.1.2",
        "markupsafe>=2.1.0",
        "typer>=0.9.0",
        "rich>=13.0.0",
        "pyyaml>=6.0",
        "pydantic>=2.0.0,<3.0.0",
        "typing-extensions>=4.0.0",
        "python-dotenv>=1.0.0",
        "tzdata>=2023.3"
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=23.0",
            "isort>=5.0",
            "mypy>=1.0"
        ]
    },
    entry_points={
        "console_scripts": [
            "safeplate=safeplate.cli:main",
        ],
    },
    python_requires=">=3.9",
    description="Python templates with escape-by-default variables, layouts and includes",
    author="Your Organization",
    author_email="example@example.com",
    url="https://github.com/example/safeplate",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
