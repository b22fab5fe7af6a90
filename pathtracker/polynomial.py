"""
Polynomial representation module for PathTracker.

This module provides the small expression layer the bundled homotopies are
built on: variables, (Laurent) monomials, polynomials and systems, with
evaluation, differentiation and homogenization.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

Number = (int, float, complex)


class NonPolynomialError(ValueError):
    """Raised when a polynomial-only operation meets a term with a negative exponent."""


class Variable:
    """Representation of a polynomial variable."""

    def __init__(self, name: str):
        """Initialize a variable with a name.

        Args:
            name: String name of the variable
        """
        self.name = name

    def __repr__(self) -> str:
        return self.name

    def __eq__(self, other):
        if not isinstance(other, Variable):
            return False
        return self.name == other.name

    def __hash__(self):
        return hash(self.name)

    def as_monomial(self) -> "Monomial":
        return Monomial({self: 1})

    def __pow__(self, exponent: int) -> "Polynomial":
        """Raise the variable to an integer power (negative powers allowed)."""
        if not isinstance(exponent, int):
            raise TypeError("Variable exponents must be integers")
        return Polynomial([Monomial({self: exponent})])

    def __neg__(self) -> "Monomial":
        return Monomial({self: 1}, coefficient=-1)

    def __mul__(self, other):
        return self.as_monomial() * other

    def __rmul__(self, other):
        return self.as_monomial().__rmul__(other)

    def __truediv__(self, other):
        return self.as_monomial() / other

    def __rtruediv__(self, other):
        return self.as_monomial().__rtruediv__(other)

    def __add__(self, other):
        return Polynomial([self]) + other

    def __radd__(self, other):
        return Polynomial([self]).__radd__(other)

    def __sub__(self, other):
        return Polynomial([self]) - other

    def __rsub__(self, other):
        return Polynomial([self]).__rsub__(other)


class Monomial:
    """Representation of a monomial (term in a polynomial).

    Exponents are integers. Negative exponents make the monomial a Laurent
    term, which evaluates fine but is rejected by polynomial-only operations
    such as homogenization.
    """

    def __init__(self, variables: Dict[Variable, int], coefficient: complex = 1):
        """Initialize a monomial with variables and their exponents.

        Args:
            variables: Dict mapping Variable objects to their exponents
            coefficient: Coefficient of the monomial (default: 1)
        """
        self.variables = {var: exp for var, exp in variables.items() if exp != 0}
        self.coefficient = coefficient

    def __repr__(self) -> str:
        if not self.variables:
            return str(self.coefficient)

        coef_str = ""
        if self.coefficient != 1:
            if self.coefficient == -1:
                coef_str = "-"
            else:
                coef_str = f"{self.coefficient}*"

        var_strs = []
        for var, exp in sorted(self.variables.items(), key=lambda item: item[0].name):
            if exp == 1:
                var_strs.append(f"{var.name}")
            else:
                var_strs.append(f"{var.name}^{exp}")

        return f"{coef_str}{'*'.join(var_strs)}"

    def key(self) -> Tuple[Tuple[Variable, int], ...]:
        """Hashable exponent signature, used to combine like terms."""
        return tuple(sorted(self.variables.items(), key=lambda item: item[0].name))

    def is_polynomial(self, variables: Optional[Iterable[Variable]] = None) -> bool:
        """Whether all exponents (in the given variables) are non-negative."""
        exps = self._exponents(variables)
        return all(exp >= 0 for exp in exps)

    def degree(self, variables: Optional[Iterable[Variable]] = None) -> int:
        """Total degree of the monomial, optionally restricted to some variables.

        Returns -1 when the monomial is not polynomial in those variables.
        """
        exps = self._exponents(variables)
        if any(exp < 0 for exp in exps):
            return -1
        return sum(exps)

    def _exponents(self, variables: Optional[Iterable[Variable]]) -> List[int]:
        if variables is None:
            return list(self.variables.values())
        return [self.variables.get(var, 0) for var in variables]

    def evaluate(self, values: Dict[Variable, complex]) -> complex:
        """Evaluate the monomial at specific variable values.

        Args:
            values: Dict mapping variables to their values

        Returns:
            The evaluated value of the monomial
        """
        result = self.coefficient
        for var, exp in self.variables.items():
            result *= values.get(var, 0) ** exp
        return result

    def _times(self, variables: Dict[Variable, int], coefficient: complex) -> "Monomial":
        new_vars = self.variables.copy()
        for var, exp in variables.items():
            new_vars[var] = new_vars.get(var, 0) + exp
        return Monomial(new_vars, coefficient=self.coefficient * coefficient)

    def __neg__(self) -> "Monomial":
        return Monomial(self.variables, coefficient=-self.coefficient)

    def __mul__(self, other):
        """Multiply the monomial by another object."""
        if isinstance(other, Number):
            return Monomial(self.variables, coefficient=self.coefficient * other)
        if isinstance(other, Variable):
            return self._times({other: 1}, 1)
        if isinstance(other, Monomial):
            return self._times(other.variables, other.coefficient)
        if isinstance(other, Polynomial):
            return other * self
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, Number):
            return Monomial(self.variables, coefficient=self.coefficient * other)
        return NotImplemented

    def __truediv__(self, other):
        """Divide by a scalar, a variable or a monomial (yielding a Laurent term)."""
        if isinstance(other, Number):
            return Monomial(self.variables, coefficient=self.coefficient / other)
        if isinstance(other, Variable):
            return self._times({other: -1}, 1)
        if isinstance(other, Monomial):
            inverse = {var: -exp for var, exp in other.variables.items()}
            return self._times(inverse, 1 / other.coefficient)
        return NotImplemented

    def __rtruediv__(self, other):
        if isinstance(other, Number):
            inverse = {var: -exp for var, exp in self.variables.items()}
            return Monomial(inverse, coefficient=other / self.coefficient)
        return NotImplemented

    def __add__(self, other):
        return Polynomial([self]) + other

    def __radd__(self, other):
        return Polynomial([self]).__radd__(other)

    def __sub__(self, other):
        return Polynomial([self]) - other

    def __rsub__(self, other):
        return Polynomial([self]).__rsub__(other)

    def partial_derivative(self, var: Variable) -> "Monomial":
        """Compute partial derivative with respect to a variable.

        Args:
            var: Variable to differentiate with respect to

        Returns:
            Derivative as a new Monomial
        """
        if var not in self.variables:
            return Monomial({}, coefficient=0)

        exp = self.variables[var]
        new_vars = self.variables.copy()
        new_vars[var] = exp - 1
        return Monomial(new_vars, coefficient=self.coefficient * exp)


PolynomialLike = Union["Polynomial", Monomial, Variable, int, float, complex]


def _as_terms(other) -> Optional[List[Monomial]]:
    """Convert any polynomial-like operand to a list of monomials."""
    if isinstance(other, Polynomial):
        return list(other.terms)
    if isinstance(other, Monomial):
        return [other]
    if isinstance(other, Variable):
        return [Monomial({other: 1})]
    if isinstance(other, Number):
        return [Monomial({}, coefficient=other)]
    return None


class Polynomial:
    """Representation of a multivariate (Laurent) polynomial."""

    def __init__(self, terms: List[PolynomialLike]):
        """Initialize a polynomial from a list of terms, combining like terms."""
        processed_terms = []
        for term in terms:
            converted = _as_terms(term)
            if converted is None:
                raise TypeError(f"Unsupported term type: {type(term)}")
            processed_terms.extend(converted)
        self.terms = self._combine_like_terms(processed_terms)

    @staticmethod
    def _combine_like_terms(terms: List[Monomial]) -> List[Monomial]:
        """Combine terms with the same variable exponents, dropping zeros."""
        term_dict: Dict[Tuple[Tuple[Variable, int], ...], complex] = {}
        for term in terms:
            key = term.key()
            term_dict[key] = term_dict.get(key, 0) + term.coefficient

        combined = [Monomial(dict(key), coefficient=coef)
                    for key, coef in term_dict.items() if coef != 0]
        # order by degree, then by variables, so printing is stable
        combined.sort(key=lambda m: (-sum(m.variables.values()), repr(m.key())))
        return combined

    def __repr__(self) -> str:
        if not self.terms:
            return "0"

        term_strs: List[str] = []
        for i, term in enumerate(self.terms):
            s = str(term)
            if i == 0:
                term_strs.append(s)
            elif s.startswith("-"):
                term_strs.append(f"- {s[1:]}")
            else:
                term_strs.append(f"+ {s}")
        return " ".join(term_strs)

    def is_polynomial(self, variables: Optional[Iterable[Variable]] = None) -> bool:
        variables = list(variables) if variables is not None else None
        return all(term.is_polynomial(variables) for term in self.terms)

    def degree(self, variables: Optional[Iterable[Variable]] = None) -> int:
        """Get the maximum degree of any term, optionally in some variables only.

        Returns -1 when any term is not polynomial in those variables.
        """
        if not self.terms:
            return 0
        variables = list(variables) if variables is not None else None
        degrees = [term.degree(variables) for term in self.terms]
        if any(deg < 0 for deg in degrees):
            return -1
        return max(degrees)

    def variables(self) -> Set[Variable]:
        """Get the set of all variables in the polynomial."""
        vars_set = set()
        for term in self.terms:
            vars_set.update(term.variables.keys())
        return vars_set

    def evaluate(self, values: Dict[Variable, complex]) -> complex:
        """Evaluate the polynomial at specific variable values.

        Args:
            values: Dict mapping variables to their values

        Returns:
            The evaluated value of the polynomial
        """
        return sum((term.evaluate(values) for term in self.terms), 0)

    def __neg__(self) -> "Polynomial":
        return Polynomial([-term for term in self.terms])

    def __add__(self, other):
        other_terms = _as_terms(other)
        if other_terms is None:
            return NotImplemented
        return Polynomial(self.terms + other_terms)

    def __radd__(self, other):
        return self + other

    def __sub__(self, other):
        other_terms = _as_terms(other)
        if other_terms is None:
            return NotImplemented
        return Polynomial(self.terms + [-term for term in other_terms])

    def __rsub__(self, other):
        other_terms = _as_terms(other)
        if other_terms is None:
            return NotImplemented
        return Polynomial(other_terms + [-term for term in self.terms])

    def __mul__(self, other):
        other_terms = _as_terms(other)
        if other_terms is None:
            return NotImplemented
        return Polynomial([t1 * t2 for t1 in self.terms for t2 in other_terms])

    def __rmul__(self, other):
        return self * other

    def __truediv__(self, other):
        if isinstance(other, (Number, Variable, Monomial)):
            return Polynomial([term / other for term in self.terms])
        return NotImplemented

    def __pow__(self, exponent: int) -> "Polynomial":
        """Raise the polynomial to a non-negative integer power."""
        if not isinstance(exponent, int) or exponent < 0:
            raise ValueError("Exponent must be a non-negative integer")

        result = Polynomial([1])
        base = Polynomial(self.terms)
        while exponent > 0:
            if exponent & 1:
                result = result * base
            base = base * base
            exponent >>= 1
        return result

    def partial_derivative(self, var: Variable) -> "Polynomial":
        """Compute partial derivative with respect to a variable."""
        return Polynomial([term.partial_derivative(var) for term in self.terms])

    def jacobian(self, vars_list: List[Variable]) -> List[List["Polynomial"]]:
        """Compute the (single-row) Jacobian matrix of partial derivatives."""
        return [[self.partial_derivative(var) for var in vars_list]]

    def term_degrees(self, variables: List[Variable]) -> List[int]:
        """Degree of every term in the given variables.

        Raises:
            NonPolynomialError: If some term has a negative exponent in them
        """
        degrees = []
        for term in self.terms:
            deg = term.degree(variables)
            if deg < 0:
                raise NonPolynomialError(
                    f"Cannot homogenize non-polynomial term {term} in variables {variables}")
            degrees.append(deg)
        return degrees

    def homogenize(self, variables: List[Variable], homvar: Variable) -> "Polynomial":
        """Homogenize with respect to some variables using a new variable.

        Every term of degree d is multiplied by homvar^(D - d), where D is the
        maximal term degree in `variables`. Degrees are validated before any
        term is rebuilt, so a failure leaves nothing half transformed.

        Args:
            variables: Variables the degree is measured in
            homvar: Homogenizing variable

        Returns:
            A new, homogeneous Polynomial

        Raises:
            NonPolynomialError: If any term is not polynomial in `variables`
        """
        if homvar in variables:
            raise ValueError("The homogenizing variable must not be one of the variables")

        degrees = self.term_degrees(variables)
        if not degrees:
            return Polynomial([])
        max_degree = max(degrees)
        return Polynomial([term * Monomial({homvar: max_degree - deg})
                           for term, deg in zip(self.terms, degrees)])


class PolynomialSystem:
    """Representation of a system of polynomial equations."""

    def __init__(self, equations: List[PolynomialLike]):
        """Initialize a polynomial system from a list of equations."""
        self.equations = []
        for eq in equations:
            if isinstance(eq, Polynomial):
                self.equations.append(eq)
            elif isinstance(eq, (Monomial, Variable)):
                self.equations.append(Polynomial([eq]))
            else:
                raise TypeError(f"Unsupported equation type: {type(eq)}")

    def __repr__(self) -> str:
        return "\n".join([f"{i}: {eq}" for i, eq in enumerate(self.equations)])

    def __len__(self) -> int:
        return len(self.equations)

    def variables(self) -> Set[Variable]:
        """Get the set of all variables in the system."""
        vars_set = set()
        for eq in self.equations:
            vars_set.update(eq.variables())
        return vars_set

    def evaluate(self, values: Dict[Variable, complex]) -> List[complex]:
        """Evaluate the system at specific variable values.

        Args:
            values: Dict mapping variables to their values
        Returns:
            List of evaluated values for each equation
        """
        return [eq.evaluate(values) for eq in self.equations]

    def jacobian(self, vars_list: List[Variable]) -> List[List[Polynomial]]:
        """Compute the Jacobian matrix of partial derivatives."""
        return [eq.jacobian(vars_list)[0] for eq in self.equations]

    def degrees(self, variables: Optional[Iterable[Variable]] = None) -> List[int]:
        """Get the degree of each equation (-1 for non-polynomial equations)."""
        variables = list(variables) if variables is not None else None
        return [eq.degree(variables) for eq in self.equations]

    def homogenize(self, variables: List[Variable], homvar: Variable) -> "PolynomialSystem":
        """Homogenize every equation; all equations are checked first.

        Raises:
            NonPolynomialError: If any equation is not polynomial in `variables`
        """
        for eq in self.equations:
            eq.term_degrees(variables)
        return PolynomialSystem([eq.homogenize(variables, homvar) for eq in self.equations])


def polyvar(*names: str) -> Union[Variable, Tuple[Variable, ...]]:
    """Create polynomial variables with the given names.

    Args:
        *names: Variable names

    Returns:
        A single Variable or a tuple of Variables
    """
    variables = tuple(Variable(name) for name in names)
    return variables[0] if len(variables) == 1 else variables


def make_system(*equations) -> PolynomialSystem:
    """Create a polynomial system from various types of equations.

    Raises:
        TypeError: If an equation cannot be converted to a Polynomial
    """
    processed_equations = []
    for eq in equations:
        try:
            processed_equations.append(eq if isinstance(eq, Polynomial) else Polynomial([eq]))
        except TypeError:
            raise TypeError(f"Cannot convert {type(eq)} to polynomial equation") from None
    return PolynomialSystem(processed_equations)
