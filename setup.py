from setuptools import setup

with open("README.md", "r", encoding="utf-8") as fp:
    long_description = fp.read()

setup(
    name="mcapi",
    version="0.3.0",
    description="Typed clients for Minecraft distribution services (Mojang, Fabric, Quilt, Forge, "
                "PaperMC, PurpurMC, Hangar, mclo.gs) and a rule matcher for vanilla version metadata.",
    packages=["mcapi"],
    python_requires=">=3.8",
    extras_require={
        "certifi": ["certifi"],
        "test": ["pytest"],
    },
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="GPL-3.0",
)
