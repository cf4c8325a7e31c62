from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf8") as long_desc_fd:
    long_description = long_desc_fd.read()

with open('version', 'r') as version_fd:
    version = version_fd.read().strip('\n')

requirements = []

with open('requirements.txt', 'r') as requirements_fd:
    for requirement in requirements_fd:
        # skip empty lines
        requirement = requirement.strip()

        if requirement:
            requirements.append(requirement)

setup(
    name="rush-static",
    version=version,
    author="fakefloordiv",
    description="Static files for rush: safe paths, streaming and etags",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/fakefloordiv/rush",
    packages=find_packages(include=['rush_static', 'rush_static.*']),
    entry_points={
        'console_scripts': ['rush-static=rush_static.cli:main'],
    },
    extras_require={
        'test': ['pytest>=7', 'pytest-asyncio>=0.21'],
    },
    project_urls={
        "Bug Tracker": "https://github.com/fakefloordiv/rush/issues",
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
    ],
    python_requires=">=3.8",
    install_requires=requirements
)
