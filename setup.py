from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as f:
    requirements = f.read().splitlines()

setup(
    name="mitmconf",
    version="1.0.0",
    author="mitmconf Contributors",
    description="Option resolution and validation for man-in-the-middle sessions.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/your-repo/mitmconf",
    packages=find_packages(exclude=["tests"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "dev": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "mitmconf=mitmconf.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS :: MacOS X",
        "Topic :: System :: Networking",
        "Topic :: Security",
    ],
    python_requires=">=3.11",
)
