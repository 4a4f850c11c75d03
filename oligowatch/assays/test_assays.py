# assays/test_assays.py
"""
Tests for the assay repository pages.
"""

from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase
from django.urls import reverse

from assays.api_utils import fetch_assay_names
from core.exceptions import BackendUnavailableError, BackendValidationError
from core.testing import BackendViewTestCase

ASSAY_ROW = {
    'assay_id': 3,
    'assay_name': 'Norovirus GII',
    'target_taxid_entry_id': 1,
    'taxid': 122929,
    'taxid_spec': 'Norovirus GII',
    'target_gene': 'ORF1-ORF2',
    'amplicon_id': 8,
    'amplicon_name': 'GII_ref',
    'amplicon_sequence': 'ACGTACGTAC',
    'created_at': '2025-02-01T09:00:00Z',
}

OLIGO_ROWS = [
    {'oligo_id': 1, 'sequence_name': 'QNIF2', 'dna_sequence': 'ATGTTCAGRTGGATGAGRTTCTCWGA', 'assay_id': 3},
    {'oligo_id': 2, 'sequence_name': 'COG2R', 'dna_sequence': 'TCGACGCCATCTTCATTCACA', 'assay_id': 3},
    {'oligo_id': 3, 'sequence_name': 'loose', 'dna_sequence': 'ACGT', 'assay_id': None},
]


class AssayListTest(BackendViewTestCase):

    def test_list_with_counts(self):
        self.set_rpc(fetch_user_assays=[ASSAY_ROW], fetch_user_oligos=OLIGO_ROWS)

        response = self.client.get(reverse('assays:assay_list'))

        self.assertContains(response, 'Norovirus GII')
        self.assertTrue(response.context['show_counts'])
        self.assertEqual(response.context['assays'][0]['oligo_count'], 2)

    def test_counts_degrade(self):
        self.set_rpc(
            fetch_user_assays=[ASSAY_ROW],
            fetch_user_oligos=BackendUnavailableError('Failed to connect to the backend.'),
        )

        response = self.client.get(reverse('assays:assay_list'))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.context['show_counts'])


class AssayCreateTest(BackendViewTestCase):

    def setUp(self):
        super().setUp()
        self.set_rpc(fetch_user_taxids=[{'entry_id': 1, 'taxid': 122929, 'taxid_spec': 'Norovirus GII'}])

    def test_create(self):
        self.set_rpc(create_user_assay={'assay_id': 4})

        response = self.client.post(reverse('assays:assay_create'), {
            'assay_name': '  New assay ',
            'target_taxid': '1',
            'target_gene': '',
            'amplicon_name': 'ref',
            'amplicon_sequence': 'acgt acgt',
        })

        self.assertRedirects(response, reverse('assays:assay_list'), fetch_redirect_response=False)
        self.assertEqual(self.rpc_calls('create_user_assay'), [{
            'p_assay_name': 'New assay',
            'p_taxid_entry_id': 1,
            'p_target_gene': None,
            'p_amplicon_name': 'ref',
            'p_amplicon_sequence': 'ACGTACGT',
        }])

    def test_invalid_amplicon(self):
        response = self.client.post(reverse('assays:assay_create'), {
            'assay_name': 'A',
            'amplicon_sequence': 'ACGX',
        })
        self.assertContains(response, 'Sequence contains invalid characters.')
        self.assertEqual(self.rpc_calls('create_user_assay'), [])

    def test_taxid_choices_degrade(self):
        self.set_rpc(fetch_user_taxids=BackendUnavailableError('down'))
        response = self.client.get(reverse('assays:assay_create'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['form'].fields['target_taxid'].choices, [('', 'None')])

    def test_duplicate_name_is_shown(self):
        self.set_rpc(create_user_assay=BackendValidationError('Assay name already exists', status_code=409))
        response = self.client.post(reverse('assays:assay_create'), {
            'assay_name': 'A',
            'amplicon_sequence': 'ACGT',
        })
        self.assertContains(response, 'Assay name already exists')

    def test_fasta_import_fills_amplicon(self):
        upload = SimpleUploadedFile('amp.fasta', b'>GII_ref description\nACGT\nTTGG\n')

        response = self.client.post(reverse('assays:assay_create'), {
            'action': 'import_fasta',
            'assay_name': 'Kept',
            'fasta_file': upload,
        })

        form = response.context['form']
        self.assertEqual(form.initial['amplicon_name'], 'GII_ref')
        self.assertEqual(form.initial['amplicon_sequence'], 'ACGTTTGG')
        self.assertEqual(form.initial['assay_name'], 'Kept')
        self.assertEqual(self.rpc_calls('create_user_assay'), [])

    def test_fasta_import_refuses_two_records(self):
        upload = SimpleUploadedFile('amp.fasta', b'>s1\nACGT\n>s2\nTTTT\n')

        response = self.client.post(reverse('assays:assay_create'), {
            'action': 'import_fasta',
            'amplicon_sequence': 'CCCC',
            'fasta_file': upload,
        })

        self.assertIn(
            'FASTA file must contain exactly one sequence (found 2)',
            self.messages_of(response),
        )
        form = response.context['form']
        self.assertNotIn('amplicon_name', form.initial)
        self.assertEqual(form.initial['amplicon_sequence'], 'CCCC')


class AssayDetailDeleteTest(BackendViewTestCase):

    def test_detail(self):
        self.set_rpc(fetch_user_assays=[ASSAY_ROW], fetch_user_oligos=OLIGO_ROWS)

        response = self.client.get(reverse('assays:assay_detail', args=[3]))

        self.assertContains(response, 'GII_ref')
        self.assertEqual([o['oligo_id'] for o in response.context['oligos']], [1, 2])

    def test_detail_unknown_assay(self):
        self.set_rpc(fetch_user_assays=[ASSAY_ROW])
        response = self.client.get(reverse('assays:assay_detail', args=[99]))
        self.assertRedirects(response, reverse('assays:assay_list'), fetch_redirect_response=False)

    def test_delete(self):
        self.set_rpc(delete_user_assay=None)
        response = self.client.post(reverse('assays:assay_delete', args=[3]))
        self.assertRedirects(response, reverse('assays:assay_list'), fetch_redirect_response=False)
        self.assertEqual(self.rpc_calls('delete_user_assay'), [{'p_assay_id': 3}])

    def test_delete_requires_post(self):
        response = self.client.get(reverse('assays:assay_delete', args=[3]))
        self.assertEqual(response.status_code, 405)


class FetchAssayNamesTest(SimpleTestCase):

    def names_for(self, payload):
        backend = mock.Mock()
        backend.select.return_value = payload
        return fetch_assay_names(backend)

    def test_names(self):
        self.assertEqual(self.names_for([{'assay_id': '3', 'assay_name': 'GII'}]), {3: 'GII'})

    def test_row_without_id_falls_back(self):
        self.assertIsNone(self.names_for([{'assay_name': 'GII'}]))

    def test_non_list_body_falls_back(self):
        self.assertIsNone(self.names_for({'message': 'unexpected'}))

    def test_backend_error_falls_back(self):
        backend = mock.Mock()
        backend.select.side_effect = BackendUnavailableError('down')
        self.assertIsNone(fetch_assay_names(backend))
