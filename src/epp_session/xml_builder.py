"""
EPP XML Builder

Builds EPP request envelopes per RFC 5730. Object payloads build their own
namespaced elements; this module supplies the envelope around them.
"""

from typing import Iterable

from lxml import etree

from epp_session.commands import Command
from epp_session.config import CONTACT_NS, DOMAIN_NS, HOST_NS
from epp_session.exceptions import EPPXMLError

EPP_NS = "urn:ietf:params:xml:ns:epp-1.0"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
EPP_SCHEMA_LOCATION = f"{EPP_NS} epp-1.0.xsd"

# Secure parser for caller-supplied extension fragments
_parser = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_blank_text=True,
)


def _create_epp_root(schema_location: bool = False) -> etree._Element:
    """Create EPP root element; legacy servers expect xsi:schemaLocation."""
    nsmap = {
        None: EPP_NS,
        "domain": DOMAIN_NS,
        "contact": CONTACT_NS,
        "host": HOST_NS,
    }
    if schema_location:
        nsmap["xsi"] = XSI_NS
    root = etree.Element("{%s}epp" % EPP_NS, nsmap=nsmap)
    if schema_location:
        root.set("{%s}schemaLocation" % XSI_NS, EPP_SCHEMA_LOCATION)
    return root


def _add_cl_trid(command: etree._Element, cl_trid: str = None) -> None:
    if cl_trid:
        etree.SubElement(command, "{%s}clTRID" % EPP_NS).text = cl_trid


def _extension_elements(extension) -> Iterable[etree._Element]:
    """Yield extension elements from an element, XML text, or a list of either."""
    if isinstance(extension, (list, tuple)):
        for item in extension:
            yield from _extension_elements(item)
        return

    if isinstance(extension, str):
        extension = extension.encode("utf-8")
    if isinstance(extension, bytes):
        try:
            extension = etree.fromstring(extension, _parser)
        except etree.XMLSyntaxError as e:
            raise EPPXMLError(f"Invalid extension XML: {e}")

    if not isinstance(extension, etree._Element):
        raise EPPXMLError(f"Unsupported extension payload: {type(extension).__name__}")
    yield extension


def _add_extension(command: etree._Element, extension) -> None:
    if extension is None:
        return
    elements = list(_extension_elements(extension))
    if not elements:
        return
    container = etree.SubElement(command, "{%s}extension" % EPP_NS)
    for elem in elements:
        # copy so the caller's tree is left untouched
        container.append(etree.fromstring(etree.tostring(elem), _parser))


def _to_bytes(root: etree._Element) -> bytes:
    return etree.tostring(
        root,
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=False,
    )


class XMLBuilder:
    """
    Builds EPP XML requests.

    All methods are static and return XML bytes ready to frame. Pass
    ``schema_location=True`` for the legacy protocol variant.
    """

    @staticmethod
    def build_hello(schema_location: bool = False) -> bytes:
        """Build hello frame."""
        root = _create_epp_root(schema_location)
        etree.SubElement(root, "{%s}hello" % EPP_NS)
        return _to_bytes(root)

    @staticmethod
    def build_login(
        client_id: str,
        password: str,
        version: str = "1.0",
        lang: str = "en",
        obj_uris: Iterable[str] = (),
        ext_uris: Iterable[str] = (),
        cl_trid: str = None,
        new_password: str = None,
        schema_location: bool = False,
    ) -> bytes:
        """
        Build login command.

        Args:
            client_id: Client identifier (registrar tag)
            password: Password
            version: EPP version
            lang: Language
            obj_uris: Service URNs, advertised in order
            ext_uris: Extension URNs, advertised in order
            cl_trid: Client transaction ID
            new_password: New password (optional)
            schema_location: Add xsi:schemaLocation for legacy servers
        """
        root = _create_epp_root(schema_location)
        command = etree.SubElement(root, "{%s}command" % EPP_NS)
        login = etree.SubElement(command, "{%s}login" % EPP_NS)

        etree.SubElement(login, "{%s}clID" % EPP_NS).text = client_id
        etree.SubElement(login, "{%s}pw" % EPP_NS).text = password
        if new_password:
            etree.SubElement(login, "{%s}newPW" % EPP_NS).text = new_password

        options = etree.SubElement(login, "{%s}options" % EPP_NS)
        etree.SubElement(options, "{%s}version" % EPP_NS).text = version
        etree.SubElement(options, "{%s}lang" % EPP_NS).text = lang

        svcs = etree.SubElement(login, "{%s}svcs" % EPP_NS)
        for uri in obj_uris:
            etree.SubElement(svcs, "{%s}objURI" % EPP_NS).text = uri

        ext_uris = list(ext_uris)
        if ext_uris:
            svc_ext = etree.SubElement(svcs, "{%s}svcExtension" % EPP_NS)
            for uri in ext_uris:
                etree.SubElement(svc_ext, "{%s}extURI" % EPP_NS).text = uri

        _add_cl_trid(command, cl_trid)
        return _to_bytes(root)

    @staticmethod
    def build_logout(cl_trid: str = None, schema_location: bool = False) -> bytes:
        """Build logout command."""
        root = _create_epp_root(schema_location)
        command = etree.SubElement(root, "{%s}command" % EPP_NS)
        etree.SubElement(command, "{%s}logout" % EPP_NS)
        _add_cl_trid(command, cl_trid)
        return _to_bytes(root)

    @staticmethod
    def build_command(
        cmd: Command,
        extension=None,
        cl_trid: str = None,
        schema_location: bool = False,
    ) -> bytes:
        """
        Build a business command.

        Args:
            cmd: Command from the catalog
            extension: Optional extension element, XML text, or list of either
            cl_trid: Client transaction ID
            schema_location: Add xsi:schemaLocation for legacy servers
        """
        root = _create_epp_root(schema_location)
        command = etree.SubElement(root, "{%s}command" % EPP_NS)

        verb = etree.SubElement(command, "{%s}%s" % (EPP_NS, cmd.verb))
        for key, value in cmd.attributes.items():
            verb.set(key, value)
        cmd.build(verb)

        _add_extension(command, extension)
        _add_cl_trid(command, cl_trid)
        return _to_bytes(root)
