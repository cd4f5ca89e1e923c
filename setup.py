from setuptools import setup, find_packages

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name="ampliscan",
    version="0.1.0",
    author="ampliscan contributors",
    license="GPL",
    description="A tool for analysing oligonucleotides and designing PCR "
    "primer pairs with nearest-neighbor thermodynamics.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=["biopython>=1.80,<2", "click>=7,<9", "progress>=1.6,<2"],
    extras_require={"tests": ["pytest>=6"]},
    entry_points={"console_scripts": ["ampliscan = ampliscan.cli:cli"]},
    classifiers=[
        "Programming Language :: Python :: 3.6",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.6",
)
