from setuptools import find_packages, setup
import os
from glob import glob

package_name = 'plane_ransac'

setup(
    name='plane-ransac',
    version='1.0.0',
    packages=find_packages(exclude=['test']),
    data_files=[
        # Include config files
        (os.path.join('share', package_name, 'config'), glob('config/*.yaml')),
    ],
    python_requires='>=3.8',
    install_requires=['setuptools', 'numpy', 'PyYAML'],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=True,
    description='RANSAC dominant plane extraction for 3D point clouds',
    license='MIT',
    entry_points={
        'console_scripts': [
            'plane-ransac = plane_ransac.ransac_cli:main',
            'ransac-synthetic = plane_ransac.synthetic:main',
        ],
    },
)
