r"""
Radial profiles for the kernels available to the modeling methods.

Every profile is a triple of functions of the distance :math:`r` and the
shape parameter :math:`\varepsilon`:

.. math::

    \phi(r), \qquad f_1(r) = \frac{\phi'(r)}{r}, \qquad
    f_2(r) = \frac{1}{r^2}\left(\phi''(r) - \frac{\phi'(r)}{r}\right)

which is all that is required for the value, gradient and mixed second
derivatives of :math:`\phi(\|a - b\|)`. :math:`f_2` may be unbounded at
:math:`r = 0`; it only ever appears multiplied by a product of two
coordinate differences, so callers take the zero limit there.

Signs are chosen so that each kernel is conditionally positive definite of
its natural order.
"""
import numpy as np


def _cubic(r, eps):
    return r ** 3


def _cubic_f1(r, eps):
    return 3.0 * r


def _cubic_f2(r, eps):
    with np.errstate(divide='ignore'):
        return 3.0 / r


def _quintic(r, eps):
    return -r ** 5


def _quintic_f1(r, eps):
    return -5.0 * r ** 3


def _quintic_f2(r, eps):
    return -15.0 * r


def _gaussian(r, eps):
    return np.exp(-(eps * r) ** 2)


def _gaussian_f1(r, eps):
    return -2.0 * eps ** 2 * _gaussian(r, eps)


def _gaussian_f2(r, eps):
    return 4.0 * eps ** 4 * _gaussian(r, eps)


def _multiquadric(r, eps):
    return -np.sqrt(1.0 + (eps * r) ** 2)


def _multiquadric_f1(r, eps):
    return -eps ** 2 / np.sqrt(1.0 + (eps * r) ** 2)


def _multiquadric_f2(r, eps):
    return eps ** 4 / np.sqrt(1.0 + (eps * r) ** 2) ** 3


def _inverse_multiquadric(r, eps):
    return 1.0 / np.sqrt(1.0 + (eps * r) ** 2)


def _inverse_multiquadric_f1(r, eps):
    return -eps ** 2 * _inverse_multiquadric(r, eps) ** 3


def _inverse_multiquadric_f2(r, eps):
    return 3.0 * eps ** 4 * _inverse_multiquadric(r, eps) ** 5


def _wendland_c2(r, eps):
    t = np.maximum(1.0 - eps * r, 0.0)
    return t ** 4 * (4.0 * eps * r + 1.0)


def _wendland_c2_f1(r, eps):
    t = np.maximum(1.0 - eps * r, 0.0)
    return -20.0 * eps ** 2 * t ** 3


def _wendland_c2_f2(r, eps):
    t = np.maximum(1.0 - eps * r, 0.0)
    with np.errstate(divide='ignore', invalid='ignore'):
        return 60.0 * eps ** 3 * t ** 2 / r


KERNEL_TYPES = {
    'cubic': (_cubic, _cubic_f1, _cubic_f2),
    'quintic': (_quintic, _quintic_f1, _quintic_f2),
    'gaussian': (_gaussian, _gaussian_f1, _gaussian_f2),
    'multiquadric': (_multiquadric, _multiquadric_f1, _multiquadric_f2),
    'inverse_multiquadric': (_inverse_multiquadric, _inverse_multiquadric_f1, _inverse_multiquadric_f2),
    'wendland_c2': (_wendland_c2, _wendland_c2_f1, _wendland_c2_f2),
}
