"""Unit tests for the value-object factory and roles."""

import pytest
from pydantic import BaseModel

from flyweight_values import (
    InvalidValueError,
    Schema,
    SchemaDefinitionError,
    ValueObject,
    embed,
    value_object,
)


class TestValueObjectFactory:
    """Tests for value_object()."""

    def test_kind_exposes_type_and_schema(self, cache):
        """Test the read-only type and schema attributes."""
        Street = value_object("Street", str, cache=cache)

        assert Street.type == "Street"
        assert isinstance(Street.schema, Schema)
        assert Street.schema.brand_tag == "Street"
        assert Street("Main St").type == "Street"
        assert Street("Main St").schema is Street.schema

    def test_type_and_schema_read_only(self, cache):
        """Test that kind attributes cannot be reassigned."""
        Street = value_object("Street", str, cache=cache)

        with pytest.raises(AttributeError):
            Street.type = "Other"
        with pytest.raises(AttributeError):
            Street.schema = Schema(int)

    def test_keeps_existing_brand(self, cache):
        """Test that an already branded schema is not re-branded."""
        Street = value_object("Street", Schema(str).brand("Road"), cache=cache)

        assert Street.schema.brand_tag == "Road"
        assert Street.type == "Street"

    def test_class_name(self, cache):
        """Test kind naming from the tag."""
        assert value_object("Street", str, cache=cache).__name__ == "Street"
        assert value_object("street-name", str, cache=cache).__name__ == "ValueObject"

    @pytest.mark.parametrize("type_tag", ["", "   ", None, 5])
    def test_invalid_type_tag(self, cache, type_tag):
        """Test that empty or non-string tags are refused."""
        with pytest.raises(SchemaDefinitionError):
            value_object(type_tag, str, cache=cache)

    def test_nominal_discrimination(self, cache):
        """Test that identical schemas with different tags never mix."""
        Street = value_object("Street", str, cache=cache)
        OtherStreet = value_object("OtherStreet", str, cache=cache)

        street = Street("Some Street")
        other = OtherStreet("Some Street")

        assert isinstance(street, Street)
        assert not isinstance(street, OtherStreet)
        assert street is not other
        assert street != other

    def test_each_call_new_kind(self, cache):
        """Test that kinds are distinct classes even for one tag."""
        first = value_object("Street", str, cache=cache)
        second = value_object("Street", str, cache=cache)

        assert first is not second
        assert issubclass(first, ValueObject)


class TestRoles:
    """Tests for subclassing a kind."""

    def test_role_shares_canonical_record(self, cache):
        """Test that a subclass resolves to the kind's cached record."""
        EmailKind = value_object(
            "Email", Schema(str).refine(lambda s: "@" in s, "Not an email"), cache=cache
        )

        class Email(EmailKind):
            def domain(self) -> str:
                return self.value.split("@", 1)[1]

        email = Email("john@example.com")

        assert email is Email("john@example.com")
        assert email.domain() == "example.com"
        assert email.canonical is EmailKind("john@example.com")
        assert isinstance(email, Email)
        assert isinstance(email, EmailKind)
        assert email == EmailKind("john@example.com")
        assert email.equals("john@example.com")
        assert email.value is EmailKind("john@example.com").value
        assert Email.type == "Email"
        assert cache.stats() == {"Email": 1}

    def test_role_validates(self, cache):
        """Test that roles use the kind's schema."""

        class Email(value_object("Email", Schema(str).refine(lambda s: "@" in s), cache=cache)):
            pass

        with pytest.raises(InvalidValueError):
            Email("not-an-email")

    def test_role_with_returns_role(self, cache):
        """Test that with_ keeps the role class."""

        class Name(value_object("Name", str, cache=cache)):
            def shout(self) -> str:
                return self.value.upper()

        renamed = Name("John").with_("Jane")

        assert isinstance(renamed, Name)
        assert renamed.shout() == "JANE"

    def test_two_roles_share_record(self, cache):
        """Test that sibling roles share one record but stay distinct views."""
        Kind = value_object("Money", int, cache=cache)

        class Price(Kind):
            pass

        class Cost(Kind):
            pass

        price = Price(10)
        cost = Cost(10)

        assert price is not cost
        assert price.canonical is cost.canonical
        assert price == cost
        assert not isinstance(price, Cost)

    def test_role_repr(self, cache):
        """Test that repr uses the role name."""

        class Name(value_object("NameTag", str, cache=cache)):
            pass

        assert repr(Name("John")) == "Name('John')"


class TestEmbed:
    """Tests for the embed() adapter."""

    def test_embed_kind(self, cache):
        """Test embedding a kind's schema inside a model."""
        Street = value_object("Street", str, cache=cache)

        class Address(BaseModel):
            street: embed(Street)

        assert Address(street="Main St").street == "Main St"
        assert Address(street=Street("Main St")).street == "Main St"

    def test_embed_schema(self):
        """Test embedding a plain schema."""

        class Address(BaseModel):
            street: embed(Schema(str).transform(str.title))

        assert Address(street="main st").street == "Main St"

    def test_embed_rejects_other_objects(self):
        """Test that only kinds and schemas can be embedded."""
        with pytest.raises(SchemaDefinitionError):
            embed(str)

    def test_kind_as_model_field(self, cache):
        """Test a kind used directly as a pydantic field annotation."""
        Street = value_object("Street", str, cache=cache)

        class Address(BaseModel):
            street: Street

        address = Address(street="Main St")

        assert address.street is Street("Main St")
        assert address.model_dump() == {"street": "Main St"}
