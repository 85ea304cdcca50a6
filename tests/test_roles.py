import unittest

from quire.errors import ValidationError
from quire.metadata import metadata_from_dict
from quire.models import MetaElement
from quire.roles import CONTRIBUTOR, CREATOR, ROLE_TABLE, classify, relator_code, role_elements


def _roles(raw: dict) -> dict:
    return metadata_from_dict({}, raw).roles


class RoleClassifierTests(unittest.TestCase):
    def test_table_partitions_codes(self) -> None:
        self.assertEqual(classify("aut").kind, CREATOR)
        self.assertEqual(classify("a-edt").kind, CREATOR)
        self.assertEqual(classify("edt").kind, CONTRIBUTOR)
        self.assertTrue(classify("prt").also_publisher)
        self.assertTrue(classify("pbl").also_publisher)
        self.assertFalse(classify("a-prt").also_publisher)
        self.assertNotIn("a-pbl", ROLE_TABLE)

    def test_relator_code_strips_creator_prefix(self) -> None:
        self.assertEqual(relator_code("a-ill"), "ill")
        self.assertEqual(relator_code("aut"), "aut")

    def test_author_scalar(self) -> None:
        elements = role_elements(_roles({"aut": ["Jane Doe"]}))
        self.assertEqual(
            elements,
            [
                MetaElement("dc:creator", "Jane Doe", id="aut-0"),
                MetaElement("meta", "aut", refines="#aut-0", property="role", scheme="marc:relators"),
            ],
        )

    def test_creator_extras_refine_the_creator_id(self) -> None:
        elements = role_elements(_roles({"a-edt": [{"name": "Ed", "file-as": "Ed, E"}]}))
        self.assertEqual(elements[0], MetaElement("dc:creator", "Ed", id="a-edt-0"))
        self.assertEqual(elements[1].text, "edt")
        self.assertEqual(elements[2], MetaElement("meta", "Ed, E", refines="#a-edt-0", property="file-as"))

    def test_printer_is_emitted_twice(self) -> None:
        elements = role_elements(_roles({"prt": [{"name": "Print Co", "file-as": "PRINT CO"}]}))
        contributor = [el for el in elements if el.tag == "dc:contributor"]
        publisher = [el for el in elements if el.tag == "dc:publisher"]
        self.assertEqual(len(contributor), 1)
        self.assertEqual(len(publisher), 1)
        self.assertEqual(contributor[0].id, "prt-0")
        self.assertEqual(publisher[0].id, "pub-prt-0")
        self.assertEqual(publisher[0].text, "Print Co")

        def annotations(ref: str) -> list[tuple]:
            return [(el.property, el.text) for el in elements if el.refines == ref]

        self.assertEqual(annotations("#prt-0"), [("role", "prt"), ("file-as", "PRINT CO")])
        self.assertEqual(annotations("#pub-prt-0"), annotations("#prt-0"))

    def test_scalar_publisher_role_keeps_its_own_code(self) -> None:
        elements = role_elements(_roles({"pbl": ["House"]}))
        self.assertIn(
            MetaElement("meta", "pbl", refines="#pub-pbl-0", property="role", scheme="marc:relators"),
            elements,
        )

    def test_same_entity_under_two_publisher_roles_is_not_merged(self) -> None:
        elements = role_elements(_roles({"pbl": ["House"], "prt": ["House"]}))
        publisher_ids = [el.id for el in elements if el.tag == "dc:publisher"]
        self.assertEqual(publisher_ids, ["pub-pbl-0", "pub-prt-0"])

    def test_creators_precede_contributors(self) -> None:
        elements = role_elements(_roles({"edt": ["E"], "aut": ["A"], "a-ill": ["I"]}))
        primary = [el.id for el in elements if el.tag in {"dc:creator", "dc:contributor"}]
        self.assertEqual(primary, ["a-ill-0", "aut-0", "edt-0"])

    def test_unknown_role_fails(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            role_elements(_roles({"xyz": ["Nobody"]}))
        self.assertEqual(ctx.exception.field, "xyz")

    def test_role_entries_must_be_a_list(self) -> None:
        with self.assertRaises(ValidationError):
            metadata_from_dict({}, {"aut": "Jane Doe"})


if __name__ == "__main__":
    unittest.main()
