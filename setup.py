import setuptools

setuptools.setup(
    name="optibench",
    version="0.1.0",
    author="Michael J Hayford",
    author_email="mjhoptics@gmail.com",
    description="Optical bench simulation: ray tracing, Gaussian beams and "
                "incoherent imaging for microscope design and teaching",
    license="BSD-3-Clause",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    python_requires=">=3.10",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering :: Physics",
    ],
    keywords=['geometric optics', 'ray tracing', 'gaussian beams',
              'microscopy', 'fluorescence', 'jones calculus',
              'optical bench', 'monte carlo imaging'],
    install_requires=[
        "opticalglass",
        "numpy>=1.15.0",
        "scipy>=1.1.0",
        "pandas>=0.23.4",
        "attrs>=18.1.0",
        "transforms3d>=0.3.1"
        ],
    extras_require={
        'test': ["pytest"],
    },
)
