from setuptools import setup, find_namespace_packages

setup(
    name="bucketload",
    version="0.1.0",
    packages=find_namespace_packages(include=["bucketload*"]),
    python_requires=">=3.9",
    install_requires=[
        "click",
        "psycopg2-binary",
        "python-dotenv",
        "pandas",
        "sqlalchemy>=2.0",
        "pydantic>=2",
        "toml",
        "rich",
        "google-cloud-storage",
        "google-api-core",
        "boto3",
        "botocore",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "bucketload = bucketload.main:start_cli",
        ],
    },
    author="Joel M",
    author_email="jtmcn.dev@gmail.com",
    description="A command-line tool for copying cloud storage bucket objects into warehouse tables.",
    license="MIT",
    keywords="gcs s3 bucket warehouse sqlalchemy",
)
