from setuptools import setup, find_packages

setup(
    name='dem-curvature',
    version='0.1.0',
    description='Surface curvature (Zevenbergen & Thorne, McNab, Bolstad) for digital elevation models',
    author='Matthew Whittle',
    author_email='matthewjwhittle@gmail.com',
    url='https://github.com/matthewjwhittle/dem-curvature',
    packages=find_packages(include=['demcurv', 'demcurv.*']),
    package_data={'demcurv': ['config/*.yaml']},
    python_requires='>=3.11',
    install_requires=[
        'numpy>=1.24',
        'xarray',
        'rasterio',
        'rioxarray',
        'pyyaml',
        'tqdm',
        'typer',
        'typing_extensions',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'demcurv=demcurv.cli:app',
        ],
    },
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
)
