from glob import glob
from setuptools import setup


setup(
    name='comp',
    use_scm_version={
        'fallback_version': '0.15.0',
    },
    description='Postfix (RPN) calculator',
    install_requires=[
        'regex',
        'prompt_toolkit',
    ],
    packages=['comp'],
    package_dir={'': 'src'},
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        "Programming Language :: Python :: 3",
    ],
    python_requires='>=3.8',
    setup_requires=[
        'setuptools_scm',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-cov',
            'coverage',
            'flake8',
        ],
    },
    scripts=glob('bin/*'),
    license='ISC',
)
